"""Shared pytest fixtures for cookiectl tests.

Builds real SQLite cookie databases with the column layouts browsers ship:
- Chromium, 20 columns (Chrome)
- Chromium, 22 columns (Edge, adds partition_key and has_cross_site_ancestor)
- Firefox moz_cookies
"""

import logging
import shutil
import sqlite3
import tempfile
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from cookiectl.core.logging_config import AUDIT_LOGGER_NAME
from cookiectl.core.models import BrowserFamily, BrowserStore
from cookiectl.execution.lock_resolver import LockResolver


# Chromium epoch offset: microseconds since 1601-01-01
CHROMIUM_EPOCH_OFFSET = 11644473600


def unix_to_chromium_time(unix_seconds: int) -> int:
    """Convert Unix timestamp to Chromium microseconds since 1601."""
    return (unix_seconds + CHROMIUM_EPOCH_OFFSET) * 1_000_000


# Default expiry: 2030-01-01
DEFAULT_EXPIRY_UNIX = 1893456000
DEFAULT_EXPIRY_CHROMIUM = unix_to_chromium_time(DEFAULT_EXPIRY_UNIX)
DEFAULT_CREATION_UNIX = 1704067200  # 2024-01-01
DEFAULT_CREATION_CHROMIUM = unix_to_chromium_time(DEFAULT_CREATION_UNIX)

CHROMIUM_COLUMNS_20 = """
    creation_utc INTEGER NOT NULL,
    host_key TEXT NOT NULL,
    top_frame_site_key TEXT NOT NULL,
    name TEXT NOT NULL,
    value TEXT NOT NULL,
    encrypted_value BLOB NOT NULL,
    path TEXT NOT NULL,
    expires_utc INTEGER NOT NULL,
    is_secure INTEGER NOT NULL,
    is_httponly INTEGER NOT NULL,
    last_access_utc INTEGER NOT NULL,
    has_expires INTEGER NOT NULL,
    is_persistent INTEGER NOT NULL,
    priority INTEGER NOT NULL,
    samesite INTEGER NOT NULL,
    source_scheme INTEGER NOT NULL,
    source_port INTEGER NOT NULL,
    is_same_party INTEGER NOT NULL,
    last_update_utc INTEGER NOT NULL,
    source_type INTEGER NOT NULL
"""

CHROMIUM_COLUMNS_22 = CHROMIUM_COLUMNS_20 + """,
    partition_key TEXT NOT NULL,
    has_cross_site_ancestor INTEGER NOT NULL
"""

FIREFOX_COLUMNS = """
    id INTEGER PRIMARY KEY,
    originAttributes TEXT NOT NULL DEFAULT '',
    name TEXT NOT NULL,
    value TEXT NOT NULL,
    host TEXT NOT NULL,
    path TEXT NOT NULL DEFAULT '/',
    expiry INTEGER NOT NULL,
    lastAccessed INTEGER NOT NULL,
    creationTime INTEGER NOT NULL,
    isSecure INTEGER NOT NULL DEFAULT 0,
    isHttpOnly INTEGER NOT NULL DEFAULT 0,
    inBrowserElement INTEGER NOT NULL DEFAULT 0,
    sameSite INTEGER NOT NULL DEFAULT 0,
    rawSameSite INTEGER NOT NULL DEFAULT 0,
    schemeMap INTEGER NOT NULL DEFAULT 0,
    isPartitionedAttributeSet INTEGER NOT NULL DEFAULT 0
"""


def _as_row(entry: tuple | dict, defaults: dict[str, Any], host_column: str) -> dict[str, Any]:
    """Merge a (host, name) tuple or a column dict over the defaults."""
    row = dict(defaults)
    if isinstance(entry, tuple):
        row[host_column], row["name"] = entry
    else:
        row.update(entry)
    return row


def _insert(conn: sqlite3.Connection, table: str, row: dict[str, Any]) -> None:
    columns = ", ".join(row)
    placeholders = ", ".join("?" for _ in row)
    conn.execute(f"INSERT INTO {table} ({columns}) VALUES ({placeholders})", tuple(row.values()))


class CookieDbFactory:
    """Factory for creating test cookie databases."""

    @staticmethod
    def create_chromium_db(
        db_path: Path,
        cookies: list[tuple[str, str] | dict[str, Any]],
        schema_columns: int = 20,
    ) -> Path:
        """
        Create a Chromium-style cookie database.

        Args:
            db_path: Path to create the database at
            cookies: (host_key, name) tuples or dicts of column overrides
            schema_columns: 20 for Chrome, 22 for Edge

        Returns:
            Path to created database
        """
        defaults = {
            "creation_utc": DEFAULT_CREATION_CHROMIUM,
            "host_key": "",
            "top_frame_site_key": "",
            "name": "",
            "value": "v",
            "encrypted_value": b"",
            "path": "/",
            "expires_utc": DEFAULT_EXPIRY_CHROMIUM,
            "is_secure": 0,
            "is_httponly": 0,
            "last_access_utc": DEFAULT_CREATION_CHROMIUM,
            "has_expires": 1,
            "is_persistent": 1,
            "priority": 1,
            "samesite": -1,
            "source_scheme": 2,
            "source_port": 443,
            "is_same_party": 0,
            "last_update_utc": DEFAULT_CREATION_CHROMIUM,
            "source_type": 0,
        }
        columns = CHROMIUM_COLUMNS_20
        if schema_columns == 22:
            defaults.update(partition_key="", has_cross_site_ancestor=0)
            columns = CHROMIUM_COLUMNS_22

        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(db_path)
        conn.execute("CREATE TABLE meta (key LONGVARCHAR NOT NULL UNIQUE PRIMARY KEY, value LONGVARCHAR)")
        conn.execute(f"CREATE TABLE cookies ({columns})")
        for entry in cookies:
            _insert(conn, "cookies", _as_row(entry, defaults, "host_key"))
        conn.commit()
        conn.close()
        return db_path

    @staticmethod
    def create_firefox_db(
        db_path: Path,
        cookies: list[tuple[str, str] | dict[str, Any]],
    ) -> Path:
        """
        Create a Firefox-style cookie database.

        Args:
            db_path: Path to create the database at
            cookies: (host, name) tuples or dicts of column overrides

        Returns:
            Path to created database
        """
        creation = DEFAULT_CREATION_UNIX * 1_000_000  # microseconds
        defaults = {
            "name": "",
            "value": "v",
            "host": "",
            "path": "/",
            "expiry": DEFAULT_EXPIRY_UNIX,
            "lastAccessed": creation,
            "creationTime": creation,
            "isSecure": 0,
            "isHttpOnly": 0,
            "sameSite": 0,
        }

        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(db_path)
        conn.execute(f"CREATE TABLE moz_cookies ({FIREFOX_COLUMNS})")
        for entry in cookies:
            _insert(conn, "moz_cookies", _as_row(entry, defaults, "host"))
        conn.commit()
        conn.close()
        return db_path

    @staticmethod
    def set_raw_text(db_path: Path, table: str, column: str, hex_bytes: str, name: str) -> None:
        """
        Store raw bytes as TEXT in one column of the row called ``name``.

        Browsers can leave TEXT cells that are not valid UTF-8; bound
        parameters cannot produce those, so the bytes go in as a literal.
        """
        conn = sqlite3.connect(db_path)
        try:
            conn.execute(f"UPDATE {table} SET {column} = CAST(x'{hex_bytes}' AS TEXT) WHERE name = ?", (name,))
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def count_rows(db_path: Path, table: str = "cookies") -> int:
        """Return the number of rows in a table."""
        conn = sqlite3.connect(db_path)
        try:
            return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        finally:
            conn.close()

    @staticmethod
    def hosts(db_path: Path, table: str = "cookies") -> list[str]:
        """Return the sorted host column of a table."""
        column = "host" if table == "moz_cookies" else "host_key"
        conn = sqlite3.connect(db_path)
        try:
            return sorted(row[0] for row in conn.execute(f"SELECT {column} FROM {table}"))
        finally:
            conn.close()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    path = Path(tempfile.mkdtemp())
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def temp_config_file(temp_dir):
    """Create a temporary config file path."""
    return temp_dir / "config" / "config.json"


@pytest.fixture
def db_factory():
    """Return the cookie database factory."""
    return CookieDbFactory


@pytest.fixture
def github_cookies():
    """Cookies of the GitHub scenario: two whitelisted, one not."""
    return [(".github.com", "_gh_sess"), ("sub.github.com", "user_session"), (".evil.com", "tracker")]


@pytest.fixture
def chromium_store(temp_dir, github_cookies):
    """A Chrome profile holding the GitHub scenario cookies."""
    db_path = CookieDbFactory.create_chromium_db(
        temp_dir / "Chrome" / "Default" / "Network" / "Cookies", github_cookies
    )
    return BrowserStore("Chrome", "Default", db_path, BrowserFamily.CHROMIUM)


@pytest.fixture
def edge_store(temp_dir, github_cookies):
    """An Edge profile (22-column schema) holding the GitHub scenario cookies."""
    db_path = CookieDbFactory.create_chromium_db(
        temp_dir / "Edge" / "Default" / "Network" / "Cookies", github_cookies, schema_columns=22
    )
    return BrowserStore("Edge", "Default", db_path, BrowserFamily.CHROMIUM)


@pytest.fixture
def firefox_store(temp_dir, github_cookies):
    """A Firefox profile holding the GitHub scenario cookies."""
    db_path = CookieDbFactory.create_firefox_db(
        temp_dir / "Firefox" / "abc123.default-release" / "cookies.sqlite", github_cookies
    )
    return BrowserStore("Firefox", "abc123.default-release", db_path, BrowserFamily.FIREFOX)


@pytest.fixture
def lock_resolver():
    """A LockResolver that reports a fixed blocking process without touching psutil."""
    resolver = MagicMock(spec=LockResolver)
    resolver.blocking_processes.return_value = ["chrome (pid 4242)"]
    resolver.preflight_browser_check.return_value = {}
    return resolver


@pytest.fixture(autouse=True)
def isolated_logs(temp_dir):
    """Keep log files in the test directory and restore logger handlers afterwards."""
    logs_dir = temp_dir / "logs"
    root = logging.getLogger()
    audit = logging.getLogger(AUDIT_LOGGER_NAME)
    saved_root = (root.handlers[:], root.level)
    saved_audit = (audit.handlers[:], audit.level, audit.propagate)

    with patch("cookiectl.core.logging_config.LOGS_DIR", logs_dir), \
            patch("cookiectl.core.logging_config.DEBUG_LOG_FILE", logs_dir / "debug.log"), \
            patch("cookiectl.core.logging_config.AUDIT_LOG_FILE", logs_dir / "audit.log"):
        yield logs_dir

    for logger, handlers in ((root, saved_root[0]), (audit, saved_audit[0])):
        for handler in logger.handlers:
            if handler not in handlers:
                handler.close()
        logger.handlers[:] = handlers
    root.setLevel(saved_root[1])
    audit.setLevel(saved_audit[1])
    audit.propagate = saved_audit[2]
