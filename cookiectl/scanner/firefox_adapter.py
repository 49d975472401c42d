"""Firefox cookie schema adapter (``moz_cookies`` table)."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from cookiectl.core.models import BrowserFamily, Cookie, SameSite
from cookiectl.scanner.schema import SchemaAdapter, cookie_value, text_column

logger = logging.getLogger(__name__)

# Raw sameSite values (nsICookie SAMESITE_*)
_SAME_SITE = {
    0: SameSite.NONE,
    1: SameSite.LAX,
    2: SameSite.STRICT,
}


def firefox_time_to_datetime(unix_seconds: int | None) -> datetime | None:
    """
    Convert a Firefox expiry to datetime.

    Firefox stores ``expiry`` as Unix seconds since 1970-01-01.

    Returns:
        datetime in UTC, or None for a missing value (0 or NULL).
    """
    if not unix_seconds:
        return None

    try:
        return datetime.fromtimestamp(unix_seconds, tz=timezone.utc)
    except (OSError, OverflowError, ValueError):
        logger.debug("Invalid Firefox timestamp: %s", unix_seconds)
        return None


def firefox_micros_to_datetime(unix_micros: int | None) -> datetime | None:
    """
    Convert a Firefox ``creationTime``/``lastAccessed`` value to datetime.

    These columns hold Unix microseconds.
    """
    if not unix_micros:
        return None
    return firefox_time_to_datetime(unix_micros // 1_000_000)


def firefox_same_site(raw: int | None) -> SameSite:
    """Map the raw ``sameSite`` integer, unknown values are unspecified."""
    return _SAME_SITE.get(raw, SameSite.UNSPECIFIED)


class FirefoxAdapter(SchemaAdapter):
    """Adapter for Firefox-family browsers: rows keyed by integer ``id``."""

    family = BrowserFamily.FIREFOX
    TABLE = "moz_cookies"
    REQUIRED_COLUMNS = frozenset({"id", "host", "name", "value", "path", "expiry"})
    OPTIONAL_COLUMNS = frozenset({
        "isSecure",
        "isHttpOnly",
        "sameSite",
        "creationTime",
        "lastAccessed",
    })
    IDENTITY_COLUMNS = ("id",)

    def to_cookie(self, record: dict[str, Any], row_identity: tuple) -> Cookie:
        """Convert a ``moz_cookies`` row. ``host`` is kept exactly as stored."""
        return Cookie(
            host=text_column(record["host"]),
            name=text_column(record["name"]),
            value=cookie_value(record["value"]),
            path=text_column(record["path"]),
            source_profile=self.store,
            row_identity=row_identity,
            expires=firefox_time_to_datetime(record["expiry"]),
            secure=bool(record.get("isSecure") or 0),
            http_only=bool(record.get("isHttpOnly") or 0),
            same_site=firefox_same_site(record.get("sameSite")),
            creation=firefox_micros_to_datetime(record.get("creationTime")),
            last_access=firefox_micros_to_datetime(record.get("lastAccessed")),
        )
