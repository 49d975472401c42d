"""Schema adapter interface, store-file detection, and adapter factory."""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterator

from cookiectl.core.constants import SQLITE_HEADER
from cookiectl.core.errors import StoreUnreadable
from cookiectl.core.models import BrowserFamily, OpaqueValue, PlainValue

if TYPE_CHECKING:
    from cookiectl.core.models import BrowserStore, Cookie

logger = logging.getLogger(__name__)

# Table name -> family, checked in this order
_FAMILY_TABLES = (
    ("moz_cookies", BrowserFamily.FIREFOX),
    ("cookies", BrowserFamily.CHROMIUM),
)


def readonly_uri(db_path: Path, immutable: bool = False) -> str:
    """Build a SQLite URI that opens a database file read-only."""
    uri = db_path.resolve().as_uri() + "?mode=ro"
    if immutable:
        uri += "&immutable=1"
    return uri


def detect_family(store: BrowserStore) -> BrowserFamily:
    """
    Identify the cookie layout of a store file.

    The file must start with the SQLite 3 header; a ``moz_cookies`` table
    means Firefox, a ``cookies`` table means Chromium. The file is opened
    immutable so a browser's lock on it does not matter.

    Raises:
        StoreUnreadable: If the file is missing, not SQLite, or holds
            neither table.
    """
    db_path = store.db_path
    try:
        with open(db_path, "rb") as f:
            header = f.read(len(SQLITE_HEADER))
    except OSError as e:
        raise StoreUnreadable(store, f"cannot open file: {e.strerror or e}") from e

    if header != SQLITE_HEADER:
        raise StoreUnreadable(store, "not a SQLite database")

    try:
        conn = sqlite3.connect(readonly_uri(db_path, immutable=True), uri=True)
        try:
            tables = {
                row[0]
                for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            }
        finally:
            conn.close()
    except sqlite3.Error as e:
        raise StoreUnreadable(store, f"cannot read schema: {e}") from e

    for table, family in _FAMILY_TABLES:
        if table in tables:
            logger.debug("Detected %s layout in %s", family.value, db_path)
            return family

    raise StoreUnreadable(store, "no cookies or moz_cookies table")


class SchemaAdapter(ABC):
    """
    Knows one physical cookie table layout.

    Subclasses declare the table, the columns they need, the optional
    columns they understand, and which columns may appear in a row identity.
    Connections are owned by the caller; an adapter never opens or closes one.
    """

    family: BrowserFamily
    TABLE: str
    REQUIRED_COLUMNS: frozenset[str]
    OPTIONAL_COLUMNS: frozenset[str] = frozenset()
    IDENTITY_COLUMNS: tuple[str, ...]

    def __init__(self, store: BrowserStore) -> None:
        """
        Initialize adapter for a browser store.

        Args:
            store: Handle whose cookies this adapter converts.
        """
        self.store = store

    def inspect_columns(self, conn: sqlite3.Connection) -> set[str]:
        """
        Verify the cookie table exists and has the required columns.

        Uses PRAGMA table_info so optional columns added or removed across
        browser versions never break a read.

        Returns:
            The set of column names present.

        Raises:
            StoreUnreadable: If the table or a required column is missing.
        """
        try:
            cursor = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
                (self.TABLE,),
            )
            if cursor.fetchone() is None:
                raise StoreUnreadable(self.store, f"no {self.TABLE} table")

            columns = {row[1] for row in conn.execute(f"PRAGMA table_info({self.TABLE})")}
        except sqlite3.DatabaseError as e:
            raise StoreUnreadable(self.store, f"cannot read schema: {e}") from e

        missing = self.REQUIRED_COLUMNS - columns
        if missing:
            raise StoreUnreadable(
                self.store, f"missing columns in {self.TABLE}: {', '.join(sorted(missing))}"
            )

        logger.debug("%s has %d columns in %s", self.store.label, len(columns), self.TABLE)
        return columns

    def read(self, conn: sqlite3.Connection) -> Iterator[Cookie]:
        """
        Yield every row of the cookie table as a normalized Cookie.

        Raises:
            StoreUnreadable: If the schema is wrong or the file is corrupt.
        """
        columns = self.inspect_columns(conn)
        selected = sorted((self.REQUIRED_COLUMNS | self.OPTIONAL_COLUMNS) & columns)
        identity = self.identity_columns(columns)

        previous_factories = (conn.row_factory, conn.text_factory)
        conn.row_factory = sqlite3.Row
        # TEXT arrives as raw bytes; a non-UTF-8 cell must not fail the whole read
        conn.text_factory = bytes
        try:
            cursor = conn.execute(
                f"SELECT {', '.join(selected)} FROM {self.TABLE}"
            )
            for row in cursor:
                record = dict(row)
                row_identity = tuple((col, identity_value(record[col])) for col in identity)
                yield self.to_cookie(record, row_identity)
        except sqlite3.DatabaseError as e:
            raise StoreUnreadable(self.store, f"read failed: {e}") from e
        finally:
            conn.row_factory, conn.text_factory = previous_factories

    def identity_columns(self, columns: set[str]) -> tuple[str, ...]:
        """Return the identity columns present in this table, in fixed order."""
        return tuple(col for col in self.IDENTITY_COLUMNS if col in columns)

    def delete(self, conn: sqlite3.Connection, row_identity: tuple) -> bool:
        """
        Delete the row addressed by ``row_identity``.

        Must run inside a transaction owned by the caller. Bytes values,
        kept for cells that are not valid UTF-8, are compared byte for byte.

        Returns:
            True if a row was removed, False if it no longer exists.

        Raises:
            ValueError: If the identity was not produced by this adapter.
        """
        if not row_identity:
            raise ValueError("Empty row identity")

        columns = [col for col, _ in row_identity]
        unknown = set(columns) - set(self.IDENTITY_COLUMNS)
        if unknown:
            raise ValueError(f"Not a {self.family.value} row identity: {row_identity!r}")

        where = " AND ".join(
            f"CAST({col} AS BLOB) = ?" if isinstance(value, bytes) else f"{col} = ?"
            for col, value in row_identity
        )
        cursor = conn.execute(
            f"DELETE FROM {self.TABLE} WHERE {where}",
            tuple(value for _, value in row_identity),
        )
        return cursor.rowcount > 0

    @abstractmethod
    def to_cookie(self, record: dict[str, Any], row_identity: tuple) -> Cookie:
        """Convert one raw row (column name -> value) to a Cookie."""


def text_column(value: Any) -> str:
    """Coerce a TEXT column that may hold NULL or a BLOB to str."""
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def identity_value(value: Any) -> Any:
    """
    Prepare a raw identity cell for a later DELETE.

    Decodable text becomes str. Bytes that are not UTF-8 stay bytes and are
    matched against ``CAST(col AS BLOB)``.
    """
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return value
    return value


def cookie_value(raw: Any) -> PlainValue | OpaqueValue:
    """Build a cookie value from a TEXT column; non-UTF-8 bytes are opaque."""
    if isinstance(raw, bytes):
        try:
            return PlainValue(raw.decode("utf-8"))
        except UnicodeDecodeError:
            logger.debug("Cookie value of %d bytes is not UTF-8", len(raw))
            return OpaqueValue(size=len(raw))
    return PlainValue(text_column(raw))


def create_adapter(store: BrowserStore) -> SchemaAdapter:
    """
    Factory function to create the adapter for a browser store.

    Uses ``store.family`` when the locator already knows it, otherwise
    inspects the file.

    Raises:
        StoreUnreadable: If the family cannot be determined.
    """
    # Import here to avoid circular imports
    from cookiectl.scanner.chromium_adapter import ChromiumAdapter
    from cookiectl.scanner.firefox_adapter import FirefoxAdapter

    family = store.family or detect_family(store)
    if family is BrowserFamily.CHROMIUM:
        return ChromiumAdapter(store)
    return FirefoxAdapter(store)
