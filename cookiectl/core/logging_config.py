"""Logging configuration for cookiectl."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

from .constants import (
    LOGS_DIR,
    DEBUG_LOG_FILE,
    AUDIT_LOG_FILE,
    DEBUG_LOG_MAX_BYTES,
    DEBUG_LOG_BACKUP_COUNT,
)

if TYPE_CHECKING:
    from .models import CleanReport

# Logger names
AUDIT_LOGGER_NAME = "audit"

# Format strings
DEBUG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
AUDIT_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"

# Marks handlers owned by setup_logging
_HANDLER_MARK = "_cookiectl_owned"

# Maximum number of store labels written per audit line
_AUDIT_STORE_LIMIT = 10


def _ensure_log_directory() -> None:
    """Create log directory if it doesn't exist."""
    LOGS_DIR.mkdir(parents=True, exist_ok=True)


def _attach(logger: logging.Logger, handler: logging.Handler, level: int, fmt: str) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    setattr(handler, _HANDLER_MARK, True)
    logger.addHandler(handler)


def _detach_own_handlers(logger: logging.Logger) -> None:
    """Remove and close handlers added by an earlier setup_logging call."""
    for handler in [h for h in logger.handlers if getattr(h, _HANDLER_MARK, False)]:
        logger.removeHandler(handler)
        handler.close()


def setup_logging(debug_mode: bool = False) -> None:
    """
    Configure application logging.

    Sets up two log targets:
    1. Debug log: Rotating file handler with DEBUG level
    2. Audit log: Append-only file with one line per clean run

    Calling it again replaces only the handlers it installed, so handlers
    added by an embedding program are left alone. Console output goes to
    stderr; stdout is reserved for command output such as ``--json``.

    Args:
        debug_mode: If True, also output DEBUG to the console
    """
    _ensure_log_directory()

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    _detach_own_handlers(root_logger)

    _attach(
        root_logger,
        RotatingFileHandler(
            DEBUG_LOG_FILE,
            maxBytes=DEBUG_LOG_MAX_BYTES,
            backupCount=DEBUG_LOG_BACKUP_COUNT,
            encoding="utf-8",
        ),
        logging.DEBUG,
        DEBUG_FORMAT,
    )
    if debug_mode:
        _attach(root_logger, logging.StreamHandler(sys.stderr), logging.DEBUG, CONSOLE_FORMAT)

    audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)
    audit_logger.setLevel(logging.INFO)
    audit_logger.propagate = False
    _detach_own_handlers(audit_logger)
    _attach(audit_logger, logging.FileHandler(AUDIT_LOG_FILE, mode="a", encoding="utf-8"), logging.INFO, AUDIT_FORMAT)


def get_audit_logger() -> logging.Logger:
    """Return the audit logger instance."""
    return logging.getLogger(AUDIT_LOGGER_NAME)


def log_clean_operation(report: CleanReport) -> None:
    """
    Log a clean run to the audit log.

    Args:
        report: Report produced by the Cleaner
    """
    audit = get_audit_logger()
    mode = "DRY_RUN" if report.dry_run else "CLEAN"

    touched = report.deleted or report.would_delete
    stores = sorted({c.source_profile.label for c in touched})
    failed = [f.store.label for f in report.failed_stores]

    audit.info(
        "%s | deleted=%d | would_delete=%d | skipped=%d | failed_stores=%d | stores=%s | failed=%s",
        mode,
        len(report.deleted),
        len(report.would_delete),
        len(report.skipped),
        len(report.failed_stores),
        ",".join(stores[:_AUDIT_STORE_LIMIT]) + ("..." if len(stores) > _AUDIT_STORE_LIMIT else ""),
        ",".join(failed),
    )
