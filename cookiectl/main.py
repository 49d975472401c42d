"""Command line entry point for cookiectl.

Parses arguments, loads configuration, initializes logging, and hands off to
the listing or cleaning entry points. Exit status is 0 when every targeted
store was fine, 1 when at least one store failed, 2 on fatal input errors.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from cookiectl.core.config import ConfigError, ConfigManager
from cookiectl.core.constants import APP_NAME, APP_VERSION
from cookiectl.core.errors import StoreUnreadable, WhitelistUnreadable
from cookiectl.core.logging_config import setup_logging
from cookiectl.core.models import BrowserStore, CleanReport, StoreFailure
from cookiectl.core.query import CookieFilter, format_fields, parse_fields
from cookiectl.core.whitelist import Whitelist
from cookiectl.execution.cleaner import Cleaner
from cookiectl.execution.lock_resolver import LockResolver
from cookiectl.scanner.inventory import list_cookies
from cookiectl.scanner.profile_resolver import ProfileResolver

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_STORE_FAILED = 1
EXIT_FATAL = 2


class UsageError(Exception):
    """Invalid input that stops the run before any store is touched."""


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with its subcommands."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="List and whitelist-clean Firefox and Chromium cookie stores.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    parser.add_argument("--debug", action="store_true", help="Log debug output to the console")
    parser.add_argument("--config", type=Path, help="Path to an alternative config.json")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("profiles", help="List discovered cookie stores")

    list_parser = subparsers.add_parser("list", help="Print cookies from every store")
    list_parser.add_argument("--domain", help="Only cookies for this domain and its subdomains")
    list_parser.add_argument("--exact", action="store_true", help="Match --domain exactly")
    list_parser.add_argument("--browser", help="Only this browser (e.g. Firefox, Chrome)")
    list_parser.add_argument("--profile", help="Only this profile")
    list_parser.add_argument("--fields", help="Comma separated fields, or 'all'")
    list_parser.add_argument(
        "--db", type=Path, action="append", metavar="PATH",
        help="Read this cookie database instead of discovered stores (repeatable)",
    )

    clean_parser = subparsers.add_parser(
        "clean", help="Delete every cookie not covered by the whitelist (dry run by default)"
    )
    clean_parser.add_argument("--whitelist", type=Path, metavar="FILE", help="Whitelist file")
    clean_parser.add_argument("--apply", action="store_true", help="Delete for real")
    clean_parser.add_argument(
        "--allow-empty", action="store_true",
        help="Accept an empty whitelist, deleting every cookie",
    )
    clean_parser.add_argument(
        "--db", type=Path, action="append", metavar="PATH",
        help="Clean this cookie database instead of discovered stores (repeatable)",
    )
    clean_parser.add_argument("--json", action="store_true", help="Print the report as JSON")

    return parser


def resolve_stores(db_paths: Sequence[Path] | None) -> list[BrowserStore]:
    """
    Return explicit stores for ``--db`` paths, or every discovered store.

    Raises:
        UsageError: If an explicit path is not a cookie database.
    """
    if not db_paths:
        return ProfileResolver().discover_all()

    stores = []
    for db_path in db_paths:
        try:
            stores.append(BrowserStore.from_path(db_path.expanduser()))
        except StoreUnreadable as e:
            raise UsageError(str(e)) from e
    return stores


def _print_failures(failures: Sequence[StoreFailure]) -> None:
    for failure in failures:
        print(f"warning: {failure.store.label} ({failure.store.db_path}): {failure.error}", file=sys.stderr)


def cmd_profiles(args: argparse.Namespace, config: ConfigManager) -> int:
    """List every discovered store."""
    stores = ProfileResolver().discover_all()
    if not stores:
        print("No browser profiles found.")
        return EXIT_OK
    for store in stores:
        print(f"{store.label}\t{store.short_path}")
    return EXIT_OK


def cmd_list(args: argparse.Namespace, config: ConfigManager) -> int:
    """Print the selected fields of every matching cookie."""
    try:
        fields = parse_fields(args.fields or config.settings["fields"])
    except ValueError as e:
        raise UsageError(str(e)) from e

    cookie_filter = CookieFilter(
        domain=args.domain,
        exact=args.exact,
        browser=args.browser,
        profile=args.profile,
    )
    listing = list_cookies(
        resolve_stores(args.db),
        cookie_filter=cookie_filter,
        max_workers=config.settings["max_workers"],
    )

    blocks = [format_fields(cookie, fields) for cookie in listing]
    if blocks:
        print("\n\n".join(blocks))
    else:
        print("No cookies found.")

    _print_failures(listing.failed_stores)
    return EXIT_OK if listing.success else EXIT_STORE_FAILED


def load_whitelist(args: argparse.Namespace, config: ConfigManager) -> Whitelist:
    """
    Load the whitelist named on the command line or in the config.

    Raises:
        UsageError: If no whitelist is configured, or it is empty without
            ``--allow-empty``.
        WhitelistUnreadable: If the file cannot be read or parsed.
    """
    path = args.whitelist or config.whitelist_path
    if path is None:
        raise UsageError("No whitelist given; use --whitelist FILE or set whitelist_path in the config")

    whitelist = Whitelist.from_file(path.expanduser())
    if len(whitelist) == 0 and not args.allow_empty:
        raise UsageError(f"Whitelist {path} is empty; pass --allow-empty to delete every cookie")
    return whitelist


def _print_report(report: CleanReport) -> None:
    if report.dry_run:
        for cookie in report.would_delete:
            print(f"would delete  {cookie.source_profile.label}  {cookie.host}  {cookie.name}")
        print(
            f"Dry run: {len(report.would_delete)} cookies would be deleted, "
            f"{len(report.skipped)} whitelisted. Use --apply to delete."
        )
    else:
        print(
            f"Deleted {len(report.deleted)} cookies, {len(report.skipped)} whitelisted"
            + (f", {report.already_gone} already gone" if report.already_gone else "")
            + "."
        )


def cmd_clean(args: argparse.Namespace, config: ConfigManager) -> int:
    """Run a dry run or an applied clean and print the report."""
    whitelist = load_whitelist(args, config)
    stores = resolve_stores(args.db)
    lock_resolver = LockResolver()

    if args.apply:
        for browser, held in lock_resolver.preflight_browser_check(stores).items():
            print(
                f"warning: {browser} is running; {len(held)} of its stores may be locked",
                file=sys.stderr,
            )

    report = Cleaner(stores, lock_resolver=lock_resolver).clean(whitelist, apply=args.apply)

    if args.json:
        print(report.to_json())
    else:
        _print_report(report)
    _print_failures(report.failed_stores)

    if args.apply:
        config.update_last_run()
        config.save()
    return EXIT_OK if report.success else EXIT_STORE_FAILED


COMMANDS = {
    "profiles": cmd_profiles,
    "list": cmd_list,
    "clean": cmd_clean,
}


def main(argv: Sequence[str] | None = None) -> int:
    """
    Application entry point.

    Returns:
        Exit code (0 success, 1 a store failed, 2 fatal error)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = ConfigManager(args.config)
    except (ConfigError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FATAL

    setup_logging(debug_mode=args.debug or config.settings["debug"])
    logger.debug("Running %s %s", APP_NAME, args.command)

    try:
        return COMMANDS[args.command](args, config)
    except (UsageError, WhitelistUnreadable, ConfigError) as e:
        logger.error("Fatal: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
