"""Browser path constants for cookiectl."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping

from cookiectl.core.constants import get_home
from cookiectl.core.models import BrowserFamily


@dataclass(frozen=True)
class BrowserConfig:
    """Configuration for a browser's profile locations."""

    name: str  # "Chrome", "Firefox", etc.
    user_data_path: Path  # Root User Data folder (Chromium) or profiles.ini folder (Firefox)
    family: BrowserFamily  # Determines resolver and adapter
    executable_names: frozenset[str]  # Lower-case process names, for lock diagnostics


# Process names per browser, across platforms
_EXECUTABLES = {
    "Chrome": frozenset({"chrome.exe", "chrome", "google chrome"}),
    "Chromium": frozenset({"chromium", "chromium-browser", "chromium.exe"}),
    "Edge": frozenset({"msedge.exe", "msedge", "microsoft edge"}),
    "Brave": frozenset({"brave.exe", "brave", "brave browser"}),
    "Opera": frozenset({"opera.exe", "opera"}),
    "Vivaldi": frozenset({"vivaldi.exe", "vivaldi", "vivaldi-bin"}),
    "Firefox": frozenset({"firefox.exe", "firefox", "firefox-bin"}),
}


def _config(name: str, path: Path, family: BrowserFamily = BrowserFamily.CHROMIUM) -> BrowserConfig:
    return BrowserConfig(
        name=name,
        user_data_path=path,
        family=family,
        executable_names=_EXECUTABLES[name],
    )


def browsers_for_platform(
    platform: str | None = None,
    home: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> tuple[BrowserConfig, ...]:
    """
    Return the browser configurations for a platform.

    Args:
        platform: ``sys.platform`` style name. Defaults to the running one.
        home: Home directory. Defaults to ``get_home()`` (WSL aware).
        environ: Environment used for Windows folders. Defaults to os.environ.
    """
    platform = platform or sys.platform
    environ = os.environ if environ is None else environ
    home = home or get_home()

    if platform == "win32":
        local_appdata = Path(environ.get("LOCALAPPDATA", ""))
        appdata = Path(environ.get("APPDATA", ""))
        return (
            _config("Chrome", local_appdata / "Google" / "Chrome" / "User Data"),
            _config("Edge", local_appdata / "Microsoft" / "Edge" / "User Data"),
            _config("Brave", local_appdata / "BraveSoftware" / "Brave-Browser" / "User Data"),
            _config("Opera", appdata / "Opera Software" / "Opera Stable"),
            _config("Vivaldi", local_appdata / "Vivaldi" / "User Data"),
            _config("Firefox", appdata / "Mozilla" / "Firefox", BrowserFamily.FIREFOX),
        )

    if platform == "darwin":
        support = home / "Library" / "Application Support"
        return (
            _config("Chrome", support / "Google" / "Chrome"),
            _config("Chromium", support / "Chromium"),
            _config("Edge", support / "Microsoft Edge"),
            _config("Brave", support / "BraveSoftware" / "Brave-Browser"),
            _config("Vivaldi", support / "Vivaldi"),
            _config("Firefox", support / "Firefox", BrowserFamily.FIREFOX),
        )

    config_home = Path(environ.get("XDG_CONFIG_HOME") or home / ".config")
    return (
        _config("Chrome", config_home / "google-chrome"),
        _config("Chromium", config_home / "chromium"),
        _config("Edge", config_home / "microsoft-edge"),
        _config("Brave", config_home / "BraveSoftware" / "Brave-Browser"),
        _config("Vivaldi", config_home / "vivaldi"),
        _config("Firefox", home / ".mozilla" / "firefox", BrowserFamily.FIREFOX),
    )


def find_browser_config(
    name: str, configs: Iterable[BrowserConfig] | None = None
) -> BrowserConfig | None:
    """Look up a browser configuration by case-insensitive name."""
    name_lower = name.lower()
    for config in configs if configs is not None else ALL_BROWSERS:
        if config.name.lower() == name_lower:
            return config
    return None


# All supported browsers on this machine's platform
ALL_BROWSERS = browsers_for_platform()
CHROMIUM_BROWSERS = tuple(c for c in ALL_BROWSERS if c.family is BrowserFamily.CHROMIUM)
FIREFOX_BROWSERS = tuple(c for c in ALL_BROWSERS if c.family is BrowserFamily.FIREFOX)

# Directories to skip when scanning Chromium profiles
CHROMIUM_SKIP_DIRS = frozenset({
    "Crashpad",
    "Safe Browsing",
    "ShaderCache",
    "GrShaderCache",
    "GraphiteDawnCache",
    "BrowserMetrics",
    "Crowd Deny",
    "CertificateRevocation",
    "FileTypePolicies",
    "MEIPreload",
    "SSLErrorAssistant",
    "Subresource Filter",
    "ZxcvbnData",
    "hyphen-data",
    "pnacl",
    "WidevineCdm",
    "SwReporter",
    "OriginTrials",
    "OnDeviceHeadSuggestModel",
    "OptimizationGuide",
    "SafetyTips",
    "TrustTokenKeyCommitments",
    "System Profile",
    "Guest Profile",
})
