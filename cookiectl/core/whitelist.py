"""Whitelist engine for cookiectl.

A whitelist entry is a registrable-domain suffix: ``example.com`` spares
cookies for ``example.com`` and every subdomain of it, but not
``notexample.com``. There is no wildcard syntax.

Hosts and entries are compared in their ASCII (punycode) form, lower-cased,
for every browser family, so ``bücher.de`` and ``xn--bcher-kva.de`` are the
same domain whichever browser stored the cookie.

This module contains matching logic only - NO deletion operations.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator, Tuple

from .constants import WHITELIST_COMMENT
from .errors import WhitelistUnreadable

logger = logging.getLogger(__name__)

# Valid domain label pattern (underscores occur in real cookie hosts)
_DOMAIN_LABEL_PATTERN = re.compile(r"^[a-z0-9_]([a-z0-9_-]*[a-z0-9_])?$")


def to_ascii(name: str) -> str:
    """
    Return the lower-cased ASCII form of a domain name.

    Internationalized names are converted to punycode. Names the IDNA codec
    rejects are only lower-cased.
    """
    if name.isascii():
        return name.lower()
    try:
        return name.encode("idna").decode("ascii").lower()
    except UnicodeError:
        logger.debug("Cannot convert %r to punycode, comparing as is", name)
        return name.lower()


def normalize_host(cookie_host: str | None) -> str:
    """
    Normalize a cookie host for comparison.

    Strips surrounding whitespace and a single leading dot (a domain cookie
    marker), then converts to lower-cased ASCII.
    """
    if not cookie_host:
        return ""
    host = cookie_host.strip()
    if host.startswith("."):
        host = host[1:]
    return to_ascii(host)


def matches(cookie_host: str | None, whitelist_entry: str) -> bool:
    """
    Decide whether a whitelist entry covers a cookie host.

    True if the normalized host equals the entry or ends with ``"." + entry``.
    An empty host or entry never matches.
    """
    host = normalize_host(cookie_host)
    entry = to_ascii(whitelist_entry.strip())
    if not host or not entry:
        return False
    return host == entry or host.endswith("." + entry)


class Whitelist:
    """
    Ordered set of domain-suffix entries.

    A host is whitelisted if it matches at least one entry. An empty
    whitelist spares nothing.
    """

    def __init__(self, entries: Iterable[str] | None = None) -> None:
        """
        Initialize the whitelist.

        Args:
            entries: Domain entries, e.g. ["github.com", "example.org"]

        Raises:
            ValueError: If an entry is invalid.
        """
        self._entries: list[str] = []
        self._entry_set: set[str] = set()

        for entry in entries or ():
            success, error = self.add_entry(entry)
            if not success:
                raise ValueError(error)

    @staticmethod
    def normalize_entry(value: str) -> str:
        """
        Normalize a whitelist entry.

        - Strips leading/trailing whitespace
        - Removes leading dots
        - Converts to lower-cased ASCII (punycode)
        """
        return to_ascii(value.strip().lstrip("."))

    @staticmethod
    def validate_entry(entry: str) -> Tuple[bool, str]:
        """
        Validate a whitelist entry string.

        Returns:
            Tuple of (is_valid, error_message). If valid, error_message is empty.
        """
        if not entry or not isinstance(entry, str) or not entry.strip():
            return False, "Entry must be a non-empty string"

        value = Whitelist.normalize_entry(entry)
        if not value:
            return False, f"Invalid domain: '{entry.strip()}'"

        for label in value.split("."):
            if not label:
                return False, f"Invalid domain: empty label in '{value}'"
            if len(label) > 63:
                return False, f"Domain label too long: '{label}'"
            if not _DOMAIN_LABEL_PATTERN.match(label):
                return False, f"Invalid domain label: '{label}'"

        return True, ""

    def add_entry(self, entry: str) -> Tuple[bool, str]:
        """
        Add an entry after validation. Duplicates are ignored.

        Returns:
            Tuple of (success, error_message). If success, error_message is empty.
        """
        is_valid, error = self.validate_entry(entry)
        if not is_valid:
            return False, error

        value = self.normalize_entry(entry)
        if value not in self._entry_set:
            self._entry_set.add(value)
            self._entries.append(value)
        return True, ""

    def remove_entry(self, entry: str) -> bool:
        """Remove an entry. Returns True if it was present."""
        value = self.normalize_entry(entry)
        if value not in self._entry_set:
            return False
        self._entry_set.discard(value)
        self._entries.remove(value)
        return True

    def get_entries(self) -> list[str]:
        """Return the normalized entries in the order they were added."""
        return list(self._entries)

    def is_whitelisted(self, cookie_host: str | None) -> bool:
        """
        Check if a cookie host is covered by any entry.

        Walks up the label hierarchy (a.b.example.com -> b.example.com ->
        example.com -> com) with set lookups, which is equivalent to
        evaluating ``matches`` against every entry.
        """
        host = normalize_host(cookie_host)
        if not host:
            return False

        parts = host.split(".")
        for i in range(len(parts)):
            if ".".join(parts[i:]) in self._entry_set:
                return True
        return False

    @classmethod
    def from_lines(cls, lines: Iterable[str], path: Path | None = None) -> Whitelist:
        """
        Parse whitelist lines: one entry per line, blank lines and lines
        starting with ``#`` ignored.

        Raises:
            WhitelistUnreadable: On the first invalid entry.
        """
        whitelist = cls()
        for line_number, raw in enumerate(lines, start=1):
            line = raw.strip()
            if not line or line.startswith(WHITELIST_COMMENT):
                continue
            success, error = whitelist.add_entry(line)
            if not success:
                raise WhitelistUnreadable(path, error, line=line_number)
        return whitelist

    @classmethod
    def from_file(cls, path: Path) -> Whitelist:
        """
        Load a UTF-8 whitelist file.

        Raises:
            WhitelistUnreadable: If the file cannot be read or decoded, or
                contains an invalid entry.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise WhitelistUnreadable(path, f"not valid UTF-8: {e}") from e
        except OSError as e:
            raise WhitelistUnreadable(path, e.strerror or str(e)) from e

        whitelist = cls.from_lines(text.splitlines(), path=path)
        logger.debug("Loaded %d whitelist entries from %s", len(whitelist), path)
        return whitelist

    def __len__(self) -> int:
        """Return the number of entries."""
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __contains__(self, cookie_host: str) -> bool:
        """Check if a host is whitelisted (alias for is_whitelisted)."""
        return self.is_whitelisted(cookie_host)
