"""Core data models for cookiectl."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional, Union

from .constants import OPAQUE_VALUE_MARKER, get_home


class BrowserFamily(Enum):
    """On-disk cookie layouts understood by the schema adapters."""

    CHROMIUM = "chromium"
    FIREFOX = "firefox"


class SameSite(Enum):
    """Normalized SameSite attribute."""

    NONE = "None"
    LAX = "Lax"
    STRICT = "Strict"
    UNSPECIFIED = "Unspecified"


@dataclass(frozen=True)
class PlainValue:
    """A cookie value stored in clear text."""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class OpaqueValue:
    """A cookie value only present in encrypted form."""

    size: int = 0  # Length of the encrypted blob in bytes

    def __str__(self) -> str:
        return OPAQUE_VALUE_MARKER


CookieValue = Union[PlainValue, OpaqueValue]


@dataclass(frozen=True)
class BrowserStore:
    """Handle on one browser profile's cookie database."""

    browser_name: str  # e.g., "Chrome", "Firefox"
    profile_id: str  # e.g., "Default", "abc123.default-release"
    db_path: Path
    family: Optional[BrowserFamily] = None  # None: detect from the file

    @property
    def label(self) -> str:
        """Browser and profile, e.g. "Chrome/Default"."""
        return f"{self.browser_name}/{self.profile_id}"

    @property
    def short_path(self) -> str:
        """Profile directory with the home directory shown as "~"."""
        if not self.db_path.is_absolute():
            return str(self.db_path)
        parent = self.db_path.parent
        try:
            return str(Path("~") / parent.relative_to(get_home()))
        except ValueError:
            return str(parent)

    @classmethod
    def from_path(cls, db_path: Path, browser_name: str | None = None) -> BrowserStore:
        """
        Build a handle for an arbitrary database file by inspecting it.

        Raises:
            StoreUnreadable: If the file is not a recognised cookie database.
        """
        from cookiectl.scanner.schema import detect_family

        candidate = cls(browser_name=browser_name or "File", profile_id=db_path.parent.name, db_path=db_path)
        family = detect_family(candidate)
        if browser_name is None:
            browser_name = "Firefox" if family is BrowserFamily.FIREFOX else "Chromium"
        return cls(
            browser_name=browser_name,
            profile_id=db_path.parent.name or str(db_path),
            db_path=db_path,
            family=family,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "browser_name": self.browser_name,
            "profile_id": self.profile_id,
            "db_path": str(self.db_path),
            "family": self.family.value if self.family else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> BrowserStore:
        """Create instance from dictionary."""
        return cls(
            browser_name=data["browser_name"],
            profile_id=data["profile_id"],
            db_path=Path(data["db_path"]),
            family=BrowserFamily(data["family"]) if data.get("family") else None,
        )


@dataclass(frozen=True)
class Cookie:
    """
    A single cookie in browser-agnostic form.

    ``row_identity`` is a tuple of ``(column, value)`` pairs that re-locates
    the physical row. It is only meaningful together with ``source_profile``.
    """

    host: str  # As stored, may carry a leading dot
    name: str
    value: CookieValue
    path: str
    source_profile: BrowserStore
    row_identity: tuple
    expires: Optional[datetime] = None  # None: session cookie
    secure: bool = False
    http_only: bool = False
    same_site: SameSite = SameSite.UNSPECIFIED
    creation: Optional[datetime] = None
    last_access: Optional[datetime] = None

    @property
    def is_session(self) -> bool:
        """True when the cookie has no expiry."""
        return self.expires is None

    @property
    def is_opaque(self) -> bool:
        """True when the value is only available encrypted."""
        return isinstance(self.value, OpaqueValue)

    @property
    def store_key(self) -> tuple:
        """Identity that is unique across every store."""
        return (self.source_profile.db_path, self.row_identity)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "host": self.host,
            "name": self.name,
            "value": str(self.value),
            "opaque": self.is_opaque,
            "path": self.path,
            "expires": self.expires.isoformat() if self.expires else None,
            "secure": self.secure,
            "http_only": self.http_only,
            "same_site": self.same_site.value,
            "creation": self.creation.isoformat() if self.creation else None,
            "last_access": self.last_access.isoformat() if self.last_access else None,
            "browser": self.source_profile.browser_name,
            "profile": self.source_profile.profile_id,
            "db_path": str(self.source_profile.db_path),
        }


@dataclass
class StoreFailure:
    """A store that could not be read or written during a run."""

    store: BrowserStore
    kind: str  # "unreadable" or "locked"
    error: str
    blocking_processes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "store": self.store.to_dict(),
            "kind": self.kind,
            "error": self.error,
            "blocking_processes": list(self.blocking_processes),
        }


@dataclass
class DeleteOutcome:
    """Result of one atomic delete batch against a single store."""

    deleted: int = 0
    missing: list[tuple] = field(default_factory=list)  # Vanished between listing and deleting


@dataclass
class CookieListing:
    """Cookies read across stores, plus the stores that failed."""

    cookies: list[Cookie] = field(default_factory=list)
    failed_stores: list[StoreFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Return True if every store was readable."""
        return not self.failed_stores

    def __iter__(self) -> Iterator[Cookie]:
        return iter(self.cookies)

    def __len__(self) -> int:
        return len(self.cookies)


@dataclass
class CleanReport:
    """
    Outcome of a clean run across every targeted store.

    ``deleted`` is filled only when applying, ``would_delete`` only on a dry
    run. ``skipped`` holds whitelisted cookies in both modes.
    """

    dry_run: bool
    deleted: list[Cookie] = field(default_factory=list)
    would_delete: list[Cookie] = field(default_factory=list)
    skipped: list[Cookie] = field(default_factory=list)
    failed_stores: list[StoreFailure] = field(default_factory=list)
    already_gone: int = 0
    stores_processed: int = 0

    @property
    def success(self) -> bool:
        """Return True if no store failed."""
        return not self.failed_stores

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "dry_run": self.dry_run,
            "deleted": [c.to_dict() for c in self.deleted],
            "would_delete": [c.to_dict() for c in self.would_delete],
            "skipped": [c.to_dict() for c in self.skipped],
            "failed_stores": [f.to_dict() for f in self.failed_stores],
            "summary": {
                "deleted": len(self.deleted),
                "would_delete": len(self.would_delete),
                "skipped": len(self.skipped),
                "failed_stores": len(self.failed_stores),
                "already_gone": self.already_gone,
                "stores_processed": self.stores_processed,
            },
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)
