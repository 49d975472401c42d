"""Application constants and paths for cookiectl."""

import os
import sys
from pathlib import Path

# Application metadata
APP_NAME = "cookiectl"
APP_VERSION = "1.0.0"
CONFIG_VERSION = 1


def get_home() -> Path:
    """Return the user's home, preferring the Windows home under WSL."""
    wsl_users = Path("/mnt/c/Users")
    user = os.environ.get("USER")
    if user and wsl_users.is_dir():
        return wsl_users / user
    return Path.home()


def _app_root() -> Path:
    """Return the per-user application directory for this platform."""
    if sys.platform == "win32":
        return Path(os.environ.get("APPDATA", "")) / APP_NAME
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / APP_NAME


# Base paths
APP_ROOT = _app_root()
CONFIG_DIR = APP_ROOT
LOGS_DIR = APP_ROOT / "logs"

# File paths
CONFIG_FILE = CONFIG_DIR / "config.json"
DEBUG_LOG_FILE = LOGS_DIR / "debug.log"
AUDIT_LOG_FILE = LOGS_DIR / "audit.log"

# Logging settings
DEBUG_LOG_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
DEBUG_LOG_BACKUP_COUNT = 3

# Default settings
DEFAULT_SETTINGS = {
    "whitelist_path": None,
    "fields": "all",
    "max_workers": 4,
    "debug": False,
}

# Displayed in place of a value that only exists in encrypted form
OPAQUE_VALUE_MARKER = "<encrypted>"

# Seconds SQLite may wait for a competing lock before giving up
LOCK_TIMEOUT_SECONDS = 0.0

# Whitelist file comment marker
WHITELIST_COMMENT = "#"

# First bytes of every SQLite 3 database file
SQLITE_HEADER = b"SQLite format 3\x00"
