"""Delete plan builder for cookiectl.

Splits the cookies of one store into deletion candidates and whitelisted
cookies. Pure computation; nothing here touches a database.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from cookiectl.core.models import BrowserStore, Cookie
from cookiectl.core.whitelist import Whitelist

logger = logging.getLogger(__name__)


@dataclass
class StorePlan:
    """Deletion plan for a single store."""

    store: BrowserStore
    to_delete: list[Cookie] = field(default_factory=list)
    skipped: list[Cookie] = field(default_factory=list)

    @property
    def row_identities(self) -> list[tuple]:
        """Row identities of the deletion candidates, in listing order."""
        return [c.row_identity for c in self.to_delete]


class DeletePlanner:
    """Builds per-store deletion plans against a whitelist."""

    def __init__(self, whitelist: Whitelist) -> None:
        """
        Initialize the DeletePlanner.

        Args:
            whitelist: Entries sparing matching cookies. An empty whitelist
                       makes every cookie a deletion candidate.
        """
        self.whitelist = whitelist

    def plan_store(self, store: BrowserStore, cookies: Iterable[Cookie]) -> StorePlan:
        """
        Build the plan for one store.

        Cookies with an empty or malformed host are never whitelisted.

        Raises:
            ValueError: If a cookie belongs to a different store.
        """
        plan = StorePlan(store=store)

        for cookie in cookies:
            if cookie.source_profile != store:
                raise ValueError(
                    f"Cookie from {cookie.source_profile.label} cannot be planned "
                    f"against {store.label}"
                )
            if self.whitelist.is_whitelisted(cookie.host):
                plan.skipped.append(cookie)
            else:
                plan.to_delete.append(cookie)

        logger.debug(
            "Planned %s: %d to delete, %d whitelisted",
            store.label,
            len(plan.to_delete),
            len(plan.skipped),
        )
        return plan
