"""Helpers shared by the category checkers."""

from __future__ import annotations

import logging
from enum import IntFlag
from pathlib import Path

from exorcism import fsutils
from exorcism.models import ValidationResult

logger = logging.getLogger("exorcism.checks")

ELECTRON_SUFFIX = "_elect.txt"
HOLE_SUFFIX = "_holes.txt"


def resolve_root(root: Path | None) -> Path:
    return Path(root) if root is not None else Path.cwd()


def probe_text_file(result: ValidationResult, path: Path, open_flag: IntFlag) -> bool:
    """Open-probe a plain text file, recording open errors and empty files.

    Returns True when the file opened.
    """
    if not fsutils.can_open(path):
        logger.warning("Cannot open %s", path)
        result.mark(open_flag, result.open_errors, path.name)
        return False
    if fsutils.file_size(path) == 0:
        result.empty.append(path.name)
    return True


def check_count(
    result: ValidationResult,
    counter: str,
    expected: int,
    flag: IntFlag,
    label: str,
) -> None:
    found = result.count(counter)
    if found != expected:
        logger.warning("Incorrect number of %s files in %s: %d/%d", label, result.directory, found, expected)
        result.mark(flag)


def list_or_flag(result: ValidationResult, access_flag: IntFlag) -> list[Path] | None:
    """List the result directory, setting ``access_flag`` when that fails."""
    try:
        return fsutils.list_files(result.directory)
    except OSError as exc:
        logger.error("Could not read directory contents: %s (%s)", result.directory, exc)
        result.mark(access_flag)
        return None
