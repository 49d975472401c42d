"""Cookie store discovery and reading package."""

from cookiectl.scanner.browser_paths import (
    BrowserConfig,
    ALL_BROWSERS,
    CHROMIUM_BROWSERS,
    FIREFOX_BROWSERS,
    browsers_for_platform,
    find_browser_config,
)
from cookiectl.scanner.chromium_resolver import ChromiumProfileResolver
from cookiectl.scanner.firefox_resolver import FirefoxProfileResolver, read_profiles_ini, scan_profile_dirs
from cookiectl.scanner.profile_resolver import ProfileResolver
from cookiectl.scanner.schema import SchemaAdapter, create_adapter, detect_family
from cookiectl.scanner.chromium_adapter import ChromiumAdapter
from cookiectl.scanner.firefox_adapter import FirefoxAdapter
from cookiectl.scanner.cookie_store import CookieStore
from cookiectl.scanner.inventory import list_cookies
from cookiectl.scanner.db_copy import copy_db_to_temp, cleanup_temp_db

__all__ = [
    # Profile resolvers
    "ProfileResolver",
    "ChromiumProfileResolver",
    "FirefoxProfileResolver",
    "read_profiles_ini",
    "scan_profile_dirs",
    # Browser configs
    "BrowserConfig",
    "ALL_BROWSERS",
    "CHROMIUM_BROWSERS",
    "FIREFOX_BROWSERS",
    "browsers_for_platform",
    "find_browser_config",
    # Schema adapters
    "SchemaAdapter",
    "ChromiumAdapter",
    "FirefoxAdapter",
    "create_adapter",
    "detect_family",
    # Stores
    "CookieStore",
    "list_cookies",
    # Utilities
    "copy_db_to_temp",
    "cleanup_temp_db",
]
