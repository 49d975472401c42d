"""Cleaning engine package for cookiectl."""

from cookiectl.execution.lock_resolver import LockResolver
from cookiectl.execution.cleaner import Cleaner

__all__ = [
    "LockResolver",
    "Cleaner",
]
