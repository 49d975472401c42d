"""Cookie store: one database file behind its schema adapter.

SAFETY CONTRACT:
- Reads go through a temporary copy; the live file is never locked by a read
- DELETE statements are ONLY executed by ``delete_many``
- Every batch runs in one BEGIN IMMEDIATE / COMMIT transaction
- Any failure inside the batch triggers ROLLBACK, so a batch lands whole or not at all
- A competing lock fails immediately with StoreLocked; it is never retried
- No connection outlives the call that opened it
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Iterator

from cookiectl.core.constants import LOCK_TIMEOUT_SECONDS
from cookiectl.core.errors import CookieStoreError, RowNotFound, StoreLocked, StoreUnreadable
from cookiectl.core.models import BrowserStore, Cookie, DeleteOutcome
from cookiectl.scanner.db_copy import cleanup_temp_db, copy_db_to_temp
from cookiectl.scanner.schema import SchemaAdapter, create_adapter, readonly_uri

if TYPE_CHECKING:
    from cookiectl.execution.lock_resolver import LockResolver

logger = logging.getLogger(__name__)

# sqlite3 messages that mean another process holds the file
_LOCK_MESSAGES = ("database is locked", "database table is locked", "database is busy")


class CookieStore:
    """Reads and deletes cookies of a single browser profile."""

    def __init__(
        self,
        store: BrowserStore,
        adapter: SchemaAdapter | None = None,
        lock_resolver: LockResolver | None = None,
    ) -> None:
        """
        Initialize the CookieStore.

        Args:
            store: Handle of the database file.
            adapter: Schema adapter. Chosen from the store (or by inspecting
                     the file) on first use if None.
            lock_resolver: Names the processes holding a locked store.
                           Creates new one if None.
        """
        self.store = store
        self._adapter = adapter
        if lock_resolver is None:
            from cookiectl.execution.lock_resolver import LockResolver

            lock_resolver = LockResolver()
        self.lock_resolver = lock_resolver

    @property
    def adapter(self) -> SchemaAdapter:
        """Return the schema adapter, creating it on first use."""
        if self._adapter is None:
            self._adapter = create_adapter(self.store)
        return self._adapter

    def list(self) -> Iterator[Cookie]:
        """
        Yield the store's cookies one at a time.

        Raises:
            StoreUnreadable: If the file is missing, corrupt, or has an
                unexpected schema.
            StoreLocked: If the OS refuses to share the file for copying.
        """
        db_path = self.store.db_path
        if not db_path.is_file():
            raise StoreUnreadable(self.store, "cookie database not found")

        adapter = self.adapter
        temp_db = self._copy_to_temp(db_path)
        try:
            try:
                conn = sqlite3.connect(readonly_uri(temp_db), uri=True)
            except sqlite3.Error as e:
                raise StoreUnreadable(self.store, f"cannot open: {e}") from e
            try:
                yield from adapter.read(conn)
            finally:
                conn.close()
        finally:
            cleanup_temp_db(temp_db)

    def read_all(self) -> list[Cookie]:
        """Read every cookie into a list."""
        cookies = list(self.list())
        logger.debug("Read %d cookies from %s", len(cookies), self.store.label)
        return cookies

    def delete_many(self, row_identities: Iterable[tuple], strict: bool = False) -> DeleteOutcome:
        """
        Delete rows atomically: either every listed row is removed or none.

        Args:
            row_identities: Identities from cookies listed out of this store.
            strict: Raise RowNotFound (and roll back) if a row has vanished,
                    instead of counting it as already deleted.

        Returns:
            DeleteOutcome with the deleted count and the missing identities.

        Raises:
            StoreLocked: If another process holds a lock on the file.
            StoreUnreadable: If the file is missing or its schema is wrong.
            RowNotFound: In strict mode, if a row no longer exists.
        """
        identities = list(row_identities)
        outcome = DeleteOutcome()
        if not identities:
            return outcome

        db_path = self.store.db_path
        if not db_path.is_file():
            raise StoreUnreadable(self.store, "cookie database not found")

        adapter = self.adapter
        try:
            conn = sqlite3.connect(str(db_path), timeout=LOCK_TIMEOUT_SECONDS, isolation_level=None)
        except sqlite3.Error as e:
            raise StoreUnreadable(self.store, f"cannot open: {e}") from e

        try:
            # IMMEDIATE takes the write lock up front, or fails at once
            conn.execute("BEGIN IMMEDIATE")
            try:
                adapter.inspect_columns(conn)
                for identity in identities:
                    if adapter.delete(conn, identity):
                        outcome.deleted += 1
                    elif strict:
                        raise RowNotFound(self.store, identity)
                    else:
                        logger.debug("Row already gone in %s: %r", self.store.label, identity)
                        outcome.missing.append(identity)
                conn.execute("COMMIT")
            except BaseException:
                self._rollback(conn)
                raise
        except sqlite3.Error as e:
            raise self._translate_error(e) from e
        finally:
            conn.close()

        logger.info(
            "Deleted %d cookies from %s (%d already gone)",
            outcome.deleted,
            self.store.label,
            len(outcome.missing),
        )
        return outcome

    def _copy_to_temp(self, db_path: Path) -> Path:
        """Copy the live database aside, mapping OS failures to store errors."""
        try:
            return copy_db_to_temp(db_path)
        except PermissionError as e:
            raise StoreLocked(
                self.store,
                f"cannot copy database: {e.strerror or e}",
                self.lock_resolver.blocking_processes(self.store),
            ) from e
        except OSError as e:
            raise StoreUnreadable(self.store, f"cannot copy database: {e.strerror or e}") from e

    def _rollback(self, conn: sqlite3.Connection) -> None:
        try:
            conn.execute("ROLLBACK")
        except sqlite3.Error as e:
            # The transaction is discarded when the connection closes
            logger.warning("Rollback failed for %s: %s", self.store.label, e)

    def _translate_error(self, error: sqlite3.Error) -> CookieStoreError:
        """Map a sqlite3 error to StoreLocked or StoreUnreadable."""
        message = str(error)
        if any(text in message.lower() for text in _LOCK_MESSAGES):
            blocking = self.lock_resolver.blocking_processes(self.store)
            logger.warning("Store %s is locked: %s", self.store.label, message)
            return StoreLocked(self.store, message, blocking)
        logger.error("Store %s failed: %s", self.store.label, message)
        return StoreUnreadable(self.store, message)
