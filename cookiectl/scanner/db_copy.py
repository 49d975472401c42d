"""Database copy utility for lock-free cookie reading."""

from __future__ import annotations

import hashlib
import logging
import shutil
import tempfile
import uuid
from pathlib import Path

from cookiectl.core.constants import APP_NAME

logger = logging.getLogger(__name__)

# SQLite companion files that hold uncheckpointed data
_COMPANION_SUFFIXES = ("-wal", "-shm")


def copy_db_to_temp(db_path: Path) -> Path:
    """
    Copy a SQLite database and its companions to the temp directory.

    Reading the copy never takes a lock on a profile the browser is using.
    The temp name carries a path hash and a random suffix so concurrent
    reads of the same store never share a file.

    Args:
        db_path: Path to the source database file.

    Returns:
        Path to the temporary copy.

    Raises:
        FileNotFoundError: If the source database doesn't exist.
        PermissionError: If the OS refuses to share the file.
        OSError: If copying fails.
    """
    if not db_path.exists():
        raise FileNotFoundError(f"Database not found: {db_path}")

    temp_dir = Path(tempfile.gettempdir()) / APP_NAME
    temp_dir.mkdir(exist_ok=True)

    path_hash = hashlib.md5(str(db_path).encode()).hexdigest()[:8]
    temp_file = temp_dir / f"cookies_{path_hash}_{uuid.uuid4().hex[:8]}.db"

    logger.debug("Copying database %s to %s", db_path, temp_file)
    try:
        shutil.copy2(db_path, temp_file)
        for suffix in _COMPANION_SUFFIXES:
            companion = Path(str(db_path) + suffix)
            if companion.exists():
                shutil.copy2(companion, Path(str(temp_file) + suffix))
                logger.debug("Copied %s file for %s", suffix, db_path)
    except OSError:
        cleanup_temp_db(temp_file)
        raise

    return temp_file


def cleanup_temp_db(temp_path: Path) -> None:
    """
    Remove a temporary database copy and its WAL/SHM files.

    Args:
        temp_path: Path to the temporary file to remove.
    """
    try:
        for suffix in _COMPANION_SUFFIXES:
            companion = Path(str(temp_path) + suffix)
            if companion.exists():
                companion.unlink()

        if temp_path.exists():
            temp_path.unlink()
            logger.debug("Cleaned up temp database: %s", temp_path)
    except OSError as e:
        logger.warning("Failed to cleanup temp database %s: %s", temp_path, e)
