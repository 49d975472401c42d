"""Integration test fixtures.

Builds whole browser installs on disk so discovery, listing and cleaning run
against the same files:
- Domain boundary hosts (ample.com vs trample.com)
- Host key forms (dot vs non-dot, subdomains, mixed case)
- A fake machine with Chrome, Edge and Firefox installs
"""

from pathlib import Path

import pytest

from cookiectl.core.models import BrowserFamily, BrowserStore
from cookiectl.scanner.browser_paths import BrowserConfig


BOUNDARY_HOSTS = [
    ".ample.com",
    "ample.com",
    "www.ample.com",
    ".trample.com",
    "sample.com",
    "ample.com.evil.net",
    "notample.com",
]

HOST_KEY_FORMS = [
    ".example.com",
    "example.com",
    "www.example.com",
    "api.example.com",
    "WWW.Example.COM",
]


def _named(hosts: list[str]) -> list[tuple[str, str]]:
    return [(host, f"c{i}") for i, host in enumerate(hosts)]


@pytest.fixture(params=["chromium", "firefox"])
def boundary_store(request, temp_dir, db_factory) -> BrowserStore:
    """A store holding the boundary hosts, once per browser family."""
    if request.param == "firefox":
        db_path = db_factory.create_firefox_db(temp_dir / "ff" / "cookies.sqlite", _named(BOUNDARY_HOSTS))
        return BrowserStore("Firefox", "ff", db_path, BrowserFamily.FIREFOX)
    db_path = db_factory.create_chromium_db(temp_dir / "cr" / "Cookies", _named(BOUNDARY_HOSTS))
    return BrowserStore("Chrome", "cr", db_path, BrowserFamily.CHROMIUM)


@pytest.fixture
def host_forms_store(temp_dir, db_factory) -> BrowserStore:
    """A Chrome store holding every host key form of example.com."""
    db_path = db_factory.create_chromium_db(temp_dir / "forms" / "Cookies", _named(HOST_KEY_FORMS))
    return BrowserStore("Chrome", "forms", db_path, BrowserFamily.CHROMIUM)


@pytest.fixture
def fake_machine(temp_dir, db_factory, github_cookies) -> list[BrowserConfig]:
    """
    Browser installs for Chrome (two profiles), Edge and Firefox.

    Every profile holds the GitHub scenario cookies.
    """
    chrome = temp_dir / "google-chrome"
    db_factory.create_chromium_db(chrome / "Default" / "Network" / "Cookies", github_cookies)
    db_factory.create_chromium_db(chrome / "Profile 1" / "Cookies", github_cookies)
    (chrome / "Crashpad").mkdir()

    edge = temp_dir / "microsoft-edge"
    db_factory.create_chromium_db(edge / "Default" / "Network" / "Cookies", github_cookies, schema_columns=22)

    firefox = temp_dir / "firefox"
    db_factory.create_firefox_db(firefox / "k2x.default-release" / "cookies.sqlite", github_cookies)
    (firefox / "profiles.ini").write_text(
        "[Profile0]\nName=default-release\nIsRelative=1\nPath=k2x.default-release\nDefault=1\n"
    )

    return [
        BrowserConfig("Chrome", chrome, BrowserFamily.CHROMIUM, frozenset({"chrome"})),
        BrowserConfig("Edge", edge, BrowserFamily.CHROMIUM, frozenset({"msedge"})),
        BrowserConfig("Firefox", firefox, BrowserFamily.FIREFOX, frozenset({"firefox"})),
    ]
