"""Item folders on disk.

Each item owns a folder named ``YYYY-MM-DD_<slug>`` under the storage
directory. Opening a folder delegates to an external command (``open``,
``xdg-open`` ...); a failing opener is logged and never fatal.
"""

from __future__ import annotations

import logging
import re
import shutil
from datetime import date, datetime
from pathlib import Path
from typing import List, Sequence

from .errors import FolderError
from .subprocess_helper import check_command_available, run_subprocess

logger = logging.getLogger(__name__)

SLUG_MAX_LENGTH = 25
DATE_FORMAT = "%Y-%m-%d"

_NON_SLUG_RE = re.compile(r"[^a-z0-9\s]")
_SPACE_RE = re.compile(r"\s+")


def parse_date(text: str) -> date:
    """Parse a YYYY-MM-DD date.

    Raises:
        ValueError: If ``text`` is not a valid date in that format
    """
    return datetime.strptime(text.strip(), DATE_FORMAT).date()


def slugify(name: str) -> str:
    """Lowercase ``name``, drop non [a-z0-9] characters, dash the spaces."""
    slug = _NON_SLUG_RE.sub("", name.lower())
    slug = _SPACE_RE.sub("-", slug)
    return slug[:SLUG_MAX_LENGTH]


def folder_name(name: str, created_at: str) -> str:
    return f"{parse_date(created_at).strftime(DATE_FORMAT)}_{slugify(name)}"


def create_folder(storage_dir: Path, name: str, created_at: str) -> Path:
    """Create (if missing) and return the folder for an item.

    Raises:
        FolderError: If the folder cannot be created
        ValueError: If ``created_at`` is not a valid date
    """
    path = storage_dir / folder_name(name, created_at)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FolderError(f"Cannot create folder {path}: {e}") from e
    logger.debug("Created folder %s", path)
    return path


def remove_folder(path: Path) -> None:
    """Delete ``path`` recursively; a missing folder is not an error."""
    if not path.is_dir():
        return
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise FolderError(f"Cannot remove folder {path}: {e}") from e
    logger.debug("Removed folder %s", path)


def open_folder(path: Path, opener_argv: Sequence[str]) -> bool:
    """Open ``path`` with the configured opener.

    Returns:
        True if the opener ran successfully
    """
    if not path.is_dir():
        logger.warning("Folder does not exist: %s", path)
        return False
    if not opener_argv or not check_command_available(opener_argv[0]):
        logger.warning("Folder opener not available: %s", " ".join(opener_argv))
        return False

    try:
        result = run_subprocess([*opener_argv, str(path)], timeout=30)
    except RuntimeError as e:
        logger.warning("Could not open folder %s: %s", path, e)
        return False
    if result.failed:
        logger.warning(
            "Opener exited with %d for %s: %s",
            result.returncode,
            path,
            result.stderr.strip(),
        )
        return False
    return True


def user_files(path: Path) -> List[Path]:
    """Regular, non-hidden files directly inside ``path``."""
    if not path.is_dir():
        return []
    return sorted(
        p for p in path.iterdir() if p.is_file() and not p.name.startswith(".")
    )
