"""Listing entry point: read cookies from many stores in parallel."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable

from cookiectl.core.errors import CookieStoreError, StoreLocked
from cookiectl.core.models import BrowserStore, Cookie, CookieListing, StoreFailure
from cookiectl.core.query import CookieFilter, filter_cookies
from cookiectl.scanner.cookie_store import CookieStore

logger = logging.getLogger(__name__)


def failure_from_error(error: CookieStoreError) -> StoreFailure:
    """Turn a per-store exception into a report entry."""
    if isinstance(error, StoreLocked):
        return StoreFailure(
            store=error.store,
            kind="locked",
            error=error.reason,
            blocking_processes=list(error.blocking_processes),
        )
    return StoreFailure(store=error.store, kind="unreadable", error=error.reason)


def _store_matches(store: BrowserStore, cookie_filter: CookieFilter | None) -> bool:
    """Skip stores a browser/profile filter rules out before opening them."""
    if cookie_filter is None:
        return True
    if cookie_filter.browser and store.browser_name.lower() != cookie_filter.browser.lower():
        return False
    if cookie_filter.profile and store.profile_id.lower() != cookie_filter.profile.lower():
        return False
    return True


def list_cookies(
    stores: Iterable[BrowserStore],
    cookie_filter: CookieFilter | None = None,
    max_workers: int = 4,
    store_factory: Callable[[BrowserStore], CookieStore] = CookieStore,
) -> CookieListing:
    """
    Read and filter cookies from every store.

    Stores are read concurrently, each worker with its own short-lived
    connection. Results keep the order of ``stores``. A store that fails is
    recorded in ``failed_stores`` and does not affect the others.

    Args:
        stores: Store handles from the locator (or ad-hoc files).
        cookie_filter: Optional domain/browser/profile predicate.
        max_workers: Upper bound on parallel reads.
        store_factory: Builds the CookieStore for a handle.

    Returns:
        CookieListing with the accepted cookies and any failed stores.
    """
    targets = [s for s in stores if _store_matches(s, cookie_filter)]
    listing = CookieListing()
    if not targets:
        return listing

    def read(store: BrowserStore) -> list[Cookie] | StoreFailure:
        try:
            return list(filter_cookies(store_factory(store).list(), cookie_filter))
        except CookieStoreError as e:
            logger.warning("Skipping store %s: %s", store.label, e)
            return failure_from_error(e)

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(targets)))) as pool:
        for result in pool.map(read, targets):
            if isinstance(result, StoreFailure):
                listing.failed_stores.append(result)
            else:
                listing.cookies.extend(result)

    logger.debug(
        "Listed %d cookies from %d stores (%d failed)",
        len(listing.cookies),
        len(targets),
        len(listing.failed_stores),
    )
    return listing
