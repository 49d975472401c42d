"""Store locator: discovers cookie stores across all supported browsers."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from cookiectl.core.models import BrowserFamily, BrowserStore
from cookiectl.scanner.browser_paths import ALL_BROWSERS, BrowserConfig, find_browser_config
from cookiectl.scanner.chromium_resolver import ChromiumProfileResolver
from cookiectl.scanner.firefox_resolver import FirefoxProfileResolver

logger = logging.getLogger(__name__)


class ProfileResolver:
    """Discovers browser profiles across all supported browsers."""

    def __init__(self, configs: Iterable[BrowserConfig] | None = None) -> None:
        """
        Initialize the resolver.

        Args:
            configs: Browsers to scan. Defaults to this platform's browsers.
        """
        self.configs = tuple(configs) if configs is not None else ALL_BROWSERS

    def discover_all(self) -> list[BrowserStore]:
        """Discover all profiles across all browsers."""
        return list(self.iter_profiles())

    def iter_profiles(self) -> Iterator[BrowserStore]:
        """Yield profiles from all browser resolvers."""
        for config in self.configs:
            yield from self._resolver_for(config).iter_profiles()

    def discover_browser(self, name: str) -> list[BrowserStore]:
        """Discover profiles for a specific browser by name."""
        config = find_browser_config(name, self.configs)
        if config is None:
            logger.warning("Unknown browser: %s", name)
            return []
        return self._resolver_for(config).discover()

    def _resolver_for(self, config: BrowserConfig) -> ChromiumProfileResolver | FirefoxProfileResolver:
        if config.family is BrowserFamily.FIREFOX:
            return FirefoxProfileResolver(config)
        return ChromiumProfileResolver(config)
