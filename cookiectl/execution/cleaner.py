"""Whitelist-based cookie cleaning across many stores.

Each store is handled start to finish (list, plan, delete) before the next
one is opened. A store that is locked or unreadable is recorded in the
report and the run moves on: best effort across stores, atomic within one.
Dry run is the default; nothing is written unless ``apply=True``.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from cookiectl.core.delete_planner import DeletePlanner
from cookiectl.core.errors import CookieStoreError
from cookiectl.core.logging_config import log_clean_operation
from cookiectl.core.models import BrowserStore, CleanReport, StoreFailure
from cookiectl.core.whitelist import Whitelist
from cookiectl.execution.lock_resolver import LockResolver
from cookiectl.scanner.cookie_store import CookieStore
from cookiectl.scanner.inventory import failure_from_error

logger = logging.getLogger(__name__)


class Cleaner:
    """Deletes every cookie not covered by a whitelist, store by store."""

    def __init__(
        self,
        stores: Iterable[BrowserStore],
        lock_resolver: LockResolver | None = None,
        store_factory: Callable[..., CookieStore] | None = None,
    ) -> None:
        """
        Initialize the Cleaner.

        Args:
            stores: Store handles to clean.
            lock_resolver: Shared by the stores for lock diagnostics.
                           Creates new one if None.
            store_factory: Builds a CookieStore from a handle and a
                           lock_resolver keyword. Defaults to CookieStore.
        """
        self.stores = list(stores)
        self.lock_resolver = lock_resolver or LockResolver()
        self.store_factory = store_factory or CookieStore

    def clean(self, whitelist: Whitelist | Iterable[str], apply: bool = False) -> CleanReport:
        """
        Remove (or preview removing) every non-whitelisted cookie.

        Args:
            whitelist: A Whitelist, or raw entries to build one from.
                       Required; an empty one makes every cookie a
                       deletion candidate.
            apply: Delete for real. False reports ``would_delete`` only.

        Returns:
            CleanReport with deleted, would_delete, skipped and failed stores.
        """
        if whitelist is None or isinstance(whitelist, str):
            raise TypeError("clean() requires a whitelist; pass [] to delete everything")
        if not isinstance(whitelist, Whitelist):
            whitelist = Whitelist(whitelist)
        if len(whitelist) == 0:
            logger.warning("Whitelist is empty: every cookie is a deletion candidate")

        report = CleanReport(dry_run=not apply)
        planner = DeletePlanner(whitelist)

        for store in self.stores:
            try:
                cookie_store = self.store_factory(store, lock_resolver=self.lock_resolver)
                plan = planner.plan_store(store, cookie_store.list())
                report.stores_processed += 1

                if apply:
                    outcome = cookie_store.delete_many(plan.row_identities)
                    missing = set(outcome.missing)
                    report.deleted.extend(c for c in plan.to_delete if c.row_identity not in missing)
                    report.already_gone += len(missing)
                else:
                    report.would_delete.extend(plan.to_delete)
                    logger.info(
                        "DRY RUN: Would delete %d cookies from %s",
                        len(plan.to_delete),
                        store.label,
                    )
                report.skipped.extend(plan.skipped)
            except CookieStoreError as e:
                logger.warning("Store %s failed: %s", store.label, e)
                report.failed_stores.append(failure_from_error(e))
            except Exception as e:
                logger.exception("Store %s failed unexpectedly", store.label)
                report.failed_stores.append(
                    StoreFailure(store=store, kind="unreadable", error=str(e) or type(e).__name__)
                )

        log_clean_operation(report)
        logger.info(
            "%s finished: deleted=%d would_delete=%d skipped=%d failed_stores=%d",
            "Dry run" if report.dry_run else "Clean",
            len(report.deleted),
            len(report.would_delete),
            len(report.skipped),
            len(report.failed_stores),
        )
        return report
