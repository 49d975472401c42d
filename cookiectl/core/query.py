"""Read-only filtering and field projection over normalized cookies."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Iterator

from .models import Cookie
from .whitelist import matches, normalize_host, to_ascii

# Sentinel selecting every field
ALL_FIELDS = "all"

# Field name -> accessor, in display order
COOKIE_FIELDS = {
    "host": lambda c: c.host,
    "name": lambda c: c.name,
    "value": lambda c: str(c.value),
    "path": lambda c: c.path,
    "creation": lambda c: c.creation,
    "expires": lambda c: c.expires,
    "last_access": lambda c: c.last_access,
    "http_only": lambda c: c.http_only,
    "secure": lambda c: c.secure,
    "same_site": lambda c: c.same_site.value,
    "browser": lambda c: c.source_profile.browser_name,
    "profile": lambda c: c.source_profile.profile_id,
}


@dataclass(frozen=True)
class CookieFilter:
    """Predicate over cookies. Unset criteria accept everything."""

    domain: str | None = None
    exact: bool = False  # Host equality instead of suffix matching
    browser: str | None = None
    profile: str | None = None

    def accepts(self, cookie: Cookie) -> bool:
        """Return True if the cookie passes every set criterion."""
        if self.browser and cookie.source_profile.browser_name.lower() != self.browser.lower():
            return False
        if self.profile and cookie.source_profile.profile_id.lower() != self.profile.lower():
            return False
        if self.domain:
            if self.exact:
                return normalize_host(cookie.host) == to_ascii(self.domain.strip().lstrip("."))
            return matches(cookie.host, self.domain.lstrip("."))
        return True


def filter_cookies(cookies: Iterable[Cookie], cookie_filter: CookieFilter | None = None) -> Iterator[Cookie]:
    """Yield the cookies accepted by the filter."""
    if cookie_filter is None:
        yield from cookies
        return
    for cookie in cookies:
        if cookie_filter.accepts(cookie):
            yield cookie


def parse_fields(text: str) -> tuple[str, ...]:
    """
    Parse a comma separated field list, or the ``all`` sentinel.

    Raises:
        ValueError: If a field name is unknown or the list is empty.
    """
    text = text.strip()
    if text.lower() == ALL_FIELDS:
        return tuple(COOKIE_FIELDS)

    fields = tuple(f.strip().lower() for f in text.split(",") if f.strip())
    if not fields:
        raise ValueError("No fields selected")
    unknown = [f for f in fields if f not in COOKIE_FIELDS]
    if unknown:
        raise ValueError(
            f"Unknown field(s) {', '.join(unknown)}; choose from "
            f"{', '.join(COOKIE_FIELDS)} or '{ALL_FIELDS}'"
        )
    return fields


def project(cookie: Cookie, fields: Iterable[str]) -> dict[str, Any]:
    """Return the selected attributes of a cookie, in the order requested."""
    return {name: COOKIE_FIELDS[name](cookie) for name in fields}


def _format_value(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S UTC")
    return str(value)


def format_fields(cookie: Cookie, fields: Iterable[str], with_names: bool = True) -> str:
    """
    Render the selected fields as sorted, newline separated lines.

    With names each line reads ``"name: value"``.
    """
    lines = []
    for name, value in project(cookie, fields).items():
        text = _format_value(value)
        lines.append(f"{name}: {text}" if with_names else text)
    return "\n".join(sorted(lines))
