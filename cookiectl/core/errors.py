"""Error kinds raised by cookie stores and whitelist loading."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cookiectl.core.models import BrowserStore


class CookieStoreError(Exception):
    """Base class for failures that concern a single cookie store."""

    def __init__(self, store: BrowserStore, message: str) -> None:
        self.store = store
        self.reason = message
        super().__init__(f"{store.label} ({store.db_path}): {message}")


class StoreUnreadable(CookieStoreError):
    """Store file is missing, corrupted, or has an unexpected schema."""


class StoreLocked(CookieStoreError):
    """Store file is exclusively held by another process."""

    def __init__(
        self,
        store: BrowserStore,
        message: str = "database is locked",
        blocking_processes: list[str] | None = None,
    ) -> None:
        self.blocking_processes = list(blocking_processes or [])
        if self.blocking_processes:
            message = f"{message} (held by {', '.join(self.blocking_processes)})"
        super().__init__(store, message)


class RowNotFound(CookieStoreError):
    """A row scheduled for deletion no longer exists."""

    def __init__(self, store: BrowserStore, row_identity: tuple) -> None:
        self.row_identity = row_identity
        super().__init__(store, f"row {row_identity!r} not found")


class WhitelistUnreadable(Exception):
    """Whitelist file cannot be read or contains an invalid entry."""

    def __init__(self, path: Path | None, message: str, line: int | None = None) -> None:
        self.path = path
        self.line = line
        location = str(path) if path is not None else "<whitelist>"
        if line is not None:
            location = f"{location}:{line}"
        super().__init__(f"{location}: {message}")
