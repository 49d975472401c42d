"""Chromium-based browser profile resolver."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

from cookiectl.core.models import BrowserFamily, BrowserStore
from cookiectl.scanner.browser_paths import BrowserConfig, CHROMIUM_SKIP_DIRS

logger = logging.getLogger(__name__)

SAFE_BROWSING_COOKIES = "Safe Browsing Cookies"
SAFE_BROWSING_PROFILE_ID = "Safe Browsing"


class ChromiumProfileResolver:
    """Discovers profiles in Chromium-based browsers (Chrome, Edge, Brave, etc.)."""

    def __init__(self, config: BrowserConfig) -> None:
        self.config = config

    def discover(self) -> list[BrowserStore]:
        """Discover all profiles for this browser."""
        return list(self.iter_profiles())

    def iter_profiles(self) -> Iterator[BrowserStore]:
        """Yield BrowserStore for each valid profile."""
        user_data = self.config.user_data_path

        if not user_data.is_dir():
            logger.debug("%s User Data not found: %s", self.config.name, user_data)
            return

        # Single-profile layouts (Opera) keep the cookie db in the root itself
        root_db = self._find_cookie_db(user_data)
        if root_db is not None:
            yield self._store(user_data.name, root_db)
        else:
            for entry in sorted(user_data.iterdir()):
                if not entry.is_dir() or entry.name in CHROMIUM_SKIP_DIRS:
                    continue

                cookie_db = self._find_cookie_db(entry)
                if cookie_db is None:
                    continue

                yield self._store(entry.name, cookie_db)

        # Legacy Chromium kept a separate cookie jar for Safe Browsing requests
        safe_browsing_db = user_data / SAFE_BROWSING_COOKIES
        if safe_browsing_db.is_file():
            yield self._store(SAFE_BROWSING_PROFILE_ID, safe_browsing_db)

    def _store(self, profile_id: str, cookie_db: Path) -> BrowserStore:
        return BrowserStore(
            browser_name=self.config.name,
            profile_id=profile_id,
            db_path=cookie_db,
            family=BrowserFamily.CHROMIUM,
        )

    def _find_cookie_db(self, profile_dir: Path) -> Path | None:
        """Find cookie database in profile directory."""
        # Modern Chromium (v96+): Network/Cookies
        modern_path = profile_dir / "Network" / "Cookies"
        if modern_path.is_file():
            return modern_path

        # Legacy Chromium: Cookies in profile root
        legacy_path = profile_dir / "Cookies"
        if legacy_path.is_file():
            return legacy_path

        return None
