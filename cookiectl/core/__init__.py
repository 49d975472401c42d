"""Core module for cookiectl."""

from .config import ConfigManager, ConfigError
from .errors import (
    CookieStoreError,
    RowNotFound,
    StoreLocked,
    StoreUnreadable,
    WhitelistUnreadable,
)
from .logging_config import setup_logging, get_audit_logger, log_clean_operation
from .models import (
    BrowserFamily,
    BrowserStore,
    CleanReport,
    Cookie,
    CookieListing,
    CookieValue,
    DeleteOutcome,
    OpaqueValue,
    PlainValue,
    SameSite,
    StoreFailure,
)
from .whitelist import Whitelist, matches, normalize_host
from .query import ALL_FIELDS, CookieFilter, filter_cookies, format_fields, parse_fields, project
from .delete_planner import DeletePlanner, StorePlan

__all__ = [
    # Config
    "ConfigManager",
    "ConfigError",
    # Errors
    "CookieStoreError",
    "RowNotFound",
    "StoreLocked",
    "StoreUnreadable",
    "WhitelistUnreadable",
    # Logging
    "setup_logging",
    "get_audit_logger",
    "log_clean_operation",
    # Models
    "BrowserFamily",
    "BrowserStore",
    "CleanReport",
    "Cookie",
    "CookieListing",
    "CookieValue",
    "DeleteOutcome",
    "OpaqueValue",
    "PlainValue",
    "SameSite",
    "StoreFailure",
    # Whitelist
    "Whitelist",
    "matches",
    "normalize_host",
    # Query
    "ALL_FIELDS",
    "CookieFilter",
    "filter_cookies",
    "format_fields",
    "parse_fields",
    "project",
    # Planning
    "DeletePlanner",
    "StorePlan",
]
