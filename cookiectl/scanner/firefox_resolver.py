"""Firefox profile resolver.

Profiles are read from ``profiles.ini``. Installs without one (snap and
flatpak sandboxes, copied profile folders) are scanned for profile
directories holding a ``cookies.sqlite`` instead.
"""

from __future__ import annotations

import configparser
import logging
from pathlib import Path
from typing import Iterator

from cookiectl.core.models import BrowserFamily, BrowserStore
from cookiectl.scanner.browser_paths import FIREFOX_BROWSERS, BrowserConfig

logger = logging.getLogger(__name__)

FIREFOX_DB_NAME = "cookies.sqlite"


def read_profiles_ini(firefox_root: Path) -> list[Path]:
    """
    Return the profile directories listed in ``profiles.ini``, in file order.

    Relative paths are resolved against ``firefox_root``. A non-numeric
    ``IsRelative`` counts as relative, as Firefox itself treats it.
    Sections without ``Path`` and repeated paths are dropped.

    Raises:
        configparser.Error: If the file has no section headers.
        UnicodeDecodeError: If the file is not UTF-8.
    """
    parser = configparser.ConfigParser(interpolation=None)
    parser.read(firefox_root / "profiles.ini", encoding="utf-8")

    directories: list[Path] = []
    for section in parser.sections():
        if not section.startswith("Profile") or not parser.has_option(section, "Path"):
            continue

        raw_path = parser.get(section, "Path")
        try:
            relative = parser.getint(section, "IsRelative", fallback=1) != 0
        except ValueError:
            relative = True

        directory = firefox_root / raw_path if relative else Path(raw_path)
        if directory not in directories:
            directories.append(directory)
    return directories


def scan_profile_dirs(firefox_root: Path) -> list[Path]:
    """Find profile directories by looking for cookie databases one and two levels down."""
    found = [*firefox_root.glob(f"*/{FIREFOX_DB_NAME}"), *firefox_root.glob(f"Profiles/*/{FIREFOX_DB_NAME}")]
    return sorted({db.parent for db in found})


class FirefoxProfileResolver:
    """Discovers Firefox profiles for one Firefox install."""

    def __init__(self, config: BrowserConfig | None = None) -> None:
        self.config = config if config is not None else FIREFOX_BROWSERS[0]

    def discover(self) -> list[BrowserStore]:
        """Discover all Firefox profiles."""
        return list(self.iter_profiles())

    def iter_profiles(self) -> Iterator[BrowserStore]:
        """Yield a BrowserStore for each profile that has a cookie database."""
        for directory in self._profile_dirs():
            cookie_db = directory / FIREFOX_DB_NAME
            if not cookie_db.is_file():
                logger.debug("%s profile %s has no %s", self.config.name, directory, FIREFOX_DB_NAME)
                continue

            yield BrowserStore(
                browser_name=self.config.name,
                profile_id=directory.name,
                db_path=cookie_db,
                family=BrowserFamily.FIREFOX,
            )

    def _profile_dirs(self) -> list[Path]:
        root = self.config.user_data_path
        if not root.is_dir():
            logger.debug("%s root not found: %s", self.config.name, root)
            return []

        if not (root / "profiles.ini").is_file():
            logger.debug("No profiles.ini in %s, scanning for profiles", root)
            return scan_profile_dirs(root)

        try:
            return read_profiles_ini(root)
        except (configparser.Error, UnicodeDecodeError) as e:
            logger.warning("Failed to parse %s: %s", root / "profiles.ini", e)
            return []
