"""Chromium cookie schema adapter (``cookies`` table)."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from cookiectl.core.models import BrowserFamily, Cookie, OpaqueValue, PlainValue, SameSite
from cookiectl.scanner.schema import SchemaAdapter, cookie_value, text_column

logger = logging.getLogger(__name__)

# Chromium timestamp epoch offset
# Windows FILETIME epoch: 1601-01-01
# Unix epoch: 1970-01-01
# Difference: 11644473600 seconds
CHROMIUM_EPOCH_OFFSET = 11644473600

_CHROMIUM_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)

# Raw samesite values (net::CookieSameSite)
_SAME_SITE = {
    -1: SameSite.UNSPECIFIED,
    0: SameSite.NONE,
    1: SameSite.LAX,
    2: SameSite.STRICT,
}


def chromium_time_to_datetime(microseconds: int | None) -> datetime | None:
    """
    Convert Chromium timestamp to datetime.

    Chromium stores timestamps as microseconds since 1601-01-01 (Windows
    FILETIME epoch). The conversion is exact to the microsecond.

    Returns:
        datetime in UTC, or None for session cookies (value 0).
    """
    if not microseconds:
        return None

    try:
        result = _CHROMIUM_EPOCH + timedelta(microseconds=microseconds)
    except (OverflowError, ValueError):
        logger.debug("Invalid Chromium timestamp: %s", microseconds)
        return None
    if result.year < 1970:
        logger.debug("Chromium timestamp before Unix epoch: %s", microseconds)
        return None
    return result


def chromium_same_site(raw: int | None) -> SameSite:
    """Map the raw ``samesite`` integer, unknown values are unspecified."""
    return _SAME_SITE.get(raw, SameSite.UNSPECIFIED)


def chromium_value(value: Any, encrypted_value: Any) -> PlainValue | OpaqueValue:
    """
    Build the cookie value.

    When the plaintext column is empty and ``encrypted_value`` is not, the
    value is opaque; it is never decrypted. Plaintext that is not UTF-8 is
    opaque too.
    """
    plain = cookie_value(value)
    if isinstance(plain, PlainValue) and not plain.text and encrypted_value:
        return OpaqueValue(size=len(encrypted_value))
    return plain


class ChromiumAdapter(SchemaAdapter):
    """
    Adapter for Chromium-based browsers (Chrome, Edge, Brave, etc.).

    Rows are keyed by host, name and path, plus the partitioning columns
    newer schemas add to their unique index.
    """

    family = BrowserFamily.CHROMIUM
    TABLE = "cookies"
    REQUIRED_COLUMNS = frozenset({"host_key", "name", "value", "path", "expires_utc"})
    OPTIONAL_COLUMNS = frozenset({
        "encrypted_value",
        "is_secure",
        "is_httponly",
        "samesite",
        "creation_utc",
        "last_access_utc",
        "top_frame_site_key",
        "source_scheme",
        "source_port",
        "has_cross_site_ancestor",
    })
    IDENTITY_COLUMNS = (
        "host_key",
        "top_frame_site_key",
        "name",
        "path",
        "source_scheme",
        "source_port",
        "has_cross_site_ancestor",
    )

    def to_cookie(self, record: dict[str, Any], row_identity: tuple) -> Cookie:
        """Convert a ``cookies`` row. ``host_key`` may be punycoded."""
        return Cookie(
            host=text_column(record["host_key"]),
            name=text_column(record["name"]),
            value=chromium_value(record["value"], record.get("encrypted_value")),
            path=text_column(record["path"]),
            source_profile=self.store,
            row_identity=row_identity,
            expires=chromium_time_to_datetime(record["expires_utc"]),
            secure=bool(record.get("is_secure") or 0),
            http_only=bool(record.get("is_httponly") or 0),
            same_site=chromium_same_site(record.get("samesite")),
            creation=chromium_time_to_datetime(record.get("creation_utc")),
            last_access=chromium_time_to_datetime(record.get("last_access_utc")),
        )
