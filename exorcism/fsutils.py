"""Filesystem probes shared by the category checkers."""

from __future__ import annotations

import logging
import stat
from pathlib import Path

logger = logging.getLogger("exorcism.fsutils")

# First bytes of every ROOT container file
ROOT_SIGNATURE = b"root"

_NOT_FOUND = (FileNotFoundError, NotADirectoryError)


def _mode(path: Path) -> int | None:
    """``st_mode`` of ``path``, 0 when it does not exist, None when stat fails."""
    try:
        return path.stat().st_mode
    except _NOT_FOUND:
        return 0
    except OSError as exc:
        logger.debug("Cannot stat %s: %s", path, exc)
        return None


def dir_exists(path: Path) -> bool:
    """True for a directory, and for a path that exists but cannot be stat'ed.

    In the second case the following listing reports the access error.
    """
    mode = _mode(path)
    return mode is None or stat.S_ISDIR(mode)


def file_exists(path: Path) -> bool | None:
    """True for a regular file, False when absent, None when the check fails."""
    mode = _mode(path)
    if mode is None:
        return None
    return stat.S_ISREG(mode)


def path_exists(path: Path) -> bool:
    """True unless ``path`` is known to be absent."""
    return _mode(path) != 0


def _is_dir(path: Path) -> bool:
    mode = _mode(path)
    return mode is not None and stat.S_ISDIR(mode)


def list_files(directory: Path) -> list[Path]:
    """Non-directory entries one level below ``directory``, sorted by name.

    Entries that cannot be stat'ed are kept so the checkers can flag them.
    Raises OSError when the directory cannot be listed.
    """
    entries = sorted(directory.iterdir(), key=lambda p: p.name)
    return [p for p in entries if not _is_dir(p)]


def list_subdirectories(directory: Path) -> list[Path]:
    """Visible sub-directories of ``directory``, sorted by name."""
    entries = sorted(directory.iterdir(), key=lambda p: p.name)
    return [p for p in entries if _is_dir(p) and not p.name.startswith(".")]


def can_open(path: Path) -> bool:
    """Open ``path`` for reading and close it again."""
    try:
        with path.open("rb"):
            pass
    except OSError as exc:
        logger.debug("Cannot open %s: %s", path, exc)
        return False
    return True


def file_size(path: Path) -> int | None:
    """Size in bytes, or None when the file cannot be stat'ed."""
    try:
        return path.stat().st_size
    except OSError as exc:
        logger.debug("Cannot stat %s: %s", path, exc)
        return None


def is_root_file(path: Path) -> bool:
    """True when ``path`` opens and carries the ROOT container signature."""
    try:
        with path.open("rb") as fh:
            head = fh.read(len(ROOT_SIGNATURE))
    except OSError as exc:
        logger.debug("Cannot open %s: %s", path, exc)
        return False
    return head == ROOT_SIGNATURE
