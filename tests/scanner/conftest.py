"""Test fixtures for scanner module."""

from pathlib import Path

import pytest

from cookiectl.core.models import BrowserFamily
from cookiectl.scanner.browser_paths import BrowserConfig


def make_config(name: str, path: Path, family: BrowserFamily) -> BrowserConfig:
    return BrowserConfig(
        name=name,
        user_data_path=path,
        family=family,
        executable_names=frozenset({name.lower()}),
    )


@pytest.fixture
def mock_chromium_user_data(tmp_path: Path, db_factory) -> Path:
    """Create a mock Chromium User Data directory structure."""
    user_data = tmp_path / "User Data"
    user_data.mkdir()

    # Create Local State file
    (user_data / "Local State").write_text("{}")

    # Default profile with modern cookie path
    db_factory.create_chromium_db(user_data / "Default" / "Network" / "Cookies", [("a.com", "x")])

    # Profile 1 with legacy cookie path
    db_factory.create_chromium_db(user_data / "Profile 1" / "Cookies", [("b.com", "y")])

    # Profile without cookies
    (user_data / "Profile 2").mkdir()

    # Directories that should be skipped
    (user_data / "Crashpad").mkdir()
    (user_data / "System Profile" / "Network").mkdir(parents=True)
    (user_data / "System Profile" / "Network" / "Cookies").write_bytes(b"")

    return user_data


@pytest.fixture
def chromium_config(mock_chromium_user_data: Path) -> BrowserConfig:
    """Chrome configuration rooted at the mock User Data directory."""
    return make_config("Chrome", mock_chromium_user_data, BrowserFamily.CHROMIUM)


@pytest.fixture
def mock_firefox_root(tmp_path: Path, db_factory) -> Path:
    """Create a mock Firefox root directory with profiles.ini."""
    firefox_root = tmp_path / "Mozilla" / "Firefox"
    firefox_root.mkdir(parents=True)

    absolute_profile = tmp_path / "elsewhere" / "abs456.work"
    (firefox_root / "profiles.ini").write_text(
        "[General]\n"
        "StartWithLastProfile=1\n"
        "\n"
        "[Profile0]\n"
        "Name=default\n"
        "IsRelative=1\n"
        "Path=Profiles/abc123.default\n"
        "Default=1\n"
        "\n"
        "[Profile1]\n"
        "Name=dev\n"
        "IsRelative=1\n"
        "Path=Profiles/xyz789.dev\n"
        "\n"
        "[Profile2]\n"
        "Name=work\n"
        "IsRelative=0\n"
        f"Path={absolute_profile}\n"
        "\n"
        "[Profile3]\n"
        "Name=empty\n"
        "IsRelative=1\n"
        "Path=Profiles/nocookies.empty\n"
        "\n"
        "[Profile4]\n"
        "Name=duplicate\n"
        "IsRelative=1\n"
        "Path=Profiles/abc123.default\n"
        "\n"
        "[Install4F96D1932A9F858E]\n"
        "Default=Profiles/abc123.default\n"
    )

    db_factory.create_firefox_db(firefox_root / "Profiles" / "abc123.default" / "cookies.sqlite", [("a.com", "x")])
    db_factory.create_firefox_db(firefox_root / "Profiles" / "xyz789.dev" / "cookies.sqlite", [("b.com", "y")])
    db_factory.create_firefox_db(absolute_profile / "cookies.sqlite", [("c.com", "z")])
    (firefox_root / "Profiles" / "nocookies.empty").mkdir(parents=True)

    return firefox_root


@pytest.fixture
def firefox_config(mock_firefox_root: Path) -> BrowserConfig:
    """Firefox configuration rooted at the mock profiles.ini directory."""
    return make_config("Firefox", mock_firefox_root, BrowserFamily.FIREFOX)


@pytest.fixture
def browser_config():
    """Return a BrowserConfig builder for ad-hoc roots."""
    return make_config
