"""Browser process diagnostics for locked cookie stores."""

from __future__ import annotations

import logging
from typing import Iterable

import psutil

from cookiectl.core.models import BrowserStore
from cookiectl.scanner.browser_paths import ALL_BROWSERS, BrowserConfig, find_browser_config

logger = logging.getLogger(__name__)


class LockResolver:
    """
    Finds running browser processes that may hold a cookie store.

    Only reports; it never waits on, retries, or terminates anything.
    """

    def __init__(self, configs: Iterable[BrowserConfig] | None = None) -> None:
        """
        Initialize the LockResolver.

        Args:
            configs: Browsers to recognise. Defaults to every known browser.
        """
        self.configs = tuple(configs) if configs is not None else ALL_BROWSERS

    def _executables(self, store: BrowserStore | None = None) -> frozenset[str]:
        """Executable names for the store's browser, or for all browsers."""
        if store is not None:
            config = find_browser_config(store.browser_name, self.configs)
            if config is not None:
                return config.executable_names
        names: set[str] = set()
        for config in self.configs:
            names |= config.executable_names
        return frozenset(names)

    def _iter_matching(self, executables: frozenset[str]) -> Iterable[tuple[str, int]]:
        """Yield (name, pid) of running processes whose name matches."""
        try:
            for proc in psutil.process_iter(["name", "pid"]):
                try:
                    name = proc.info["name"]
                    if name and name.lower() in executables:
                        yield name, proc.info["pid"]
                except (psutil.NoSuchProcess, psutil.AccessDenied):
                    continue
        except psutil.Error as e:
            logger.warning("Error enumerating processes: %s", e)

    def blocking_processes(self, store: BrowserStore) -> list[str]:
        """
        Describe the processes likely holding a locked store.

        Returns:
            Entries like "firefox (pid 4242)", empty if none are running.
        """
        found = [
            f"{name} (pid {pid})"
            for name, pid in self._iter_matching(self._executables(store))
        ]
        if found:
            logger.debug("Processes possibly holding %s: %s", store.label, ", ".join(found))
        return found

    def get_running_browsers(self) -> set[str]:
        """
        Get the names of configured browsers that currently have a process.

        Returns:
            Browser names (e.g., {"Chrome", "Firefox"})
        """
        running_executables = {name.lower() for name, _ in self._iter_matching(self._executables())}
        return {
            config.name
            for config in self.configs
            if config.executable_names & running_executables
        }

    def preflight_browser_check(self, stores: Iterable[BrowserStore]) -> dict[str, list[BrowserStore]]:
        """
        Check which running browsers may block the given stores.

        Returns:
            Dict mapping browser names to the stores they may hold
        """
        running = {name.lower() for name in self.get_running_browsers()}
        if not running:
            return {}

        blocking: dict[str, list[BrowserStore]] = {}
        for store in stores:
            if store.browser_name.lower() in running:
                blocking.setdefault(store.browser_name, []).append(store)
        return blocking
