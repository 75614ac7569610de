"""CheckTrim -- ``trim_files/``: electron/hole trim files with hardware indices."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from exorcism import fsutils
from exorcism.checks._common import (
    ELECTRON_SUFFIX,
    HOLE_SUFFIX,
    check_count,
    list_or_flag,
    resolve_root,
)
from exorcism.config import EXPECTED_CHANNELS
from exorcism.models import Category, TrimFlag, ValidationResult

logger = logging.getLogger("exorcism.checks.trim")

TRIM_DIR = "trim_files"

_HW_INDEX_PATTERN = re.compile(r"_HW_(\d+)_SET_")


def hw_index(name: str) -> int | None:
    match = _HW_INDEX_PATTERN.search(name)
    return int(match.group(1)) if match else None


def check_trim(
    module: str,
    root: Path | None = None,
    *,
    expected: int = EXPECTED_CHANNELS,
) -> ValidationResult:
    """Validate ``<module>/trim_files``."""
    trim_dir = resolve_root(root) / module / TRIM_DIR
    result = ValidationResult.for_category(Category.TRIM, trim_dir)

    if not fsutils.dir_exists(trim_dir):
        logger.error("Directory 'trim_files' does not exist: %s", trim_dir)
        result.mark(TrimFlag.TRIM_FOLDER_MISSING)
        return result

    files = list_or_flag(result, TrimFlag.DIR_ACCESS)
    if files is None:
        return result

    seen: dict[str, set[int]] = {"electron": set(), "hole": set()}

    for path in files:
        name = path.name
        if name.endswith(ELECTRON_SUFFIX):
            polarity = "electron"
        elif name.endswith(HOLE_SUFFIX):
            polarity = "hole"
        else:
            logger.warning("Unexpected file in trim_files: %s", path)
            result.mark(TrimFlag.UNEXPECTED_FILES, result.unexpected, name)
            continue

        result.bump(polarity)
        if not fsutils.can_open(path):
            logger.warning("Cannot open %s file: %s", polarity, path)
            result.mark(TrimFlag.FILE_OPEN, result.open_errors, name)
            continue

        index = hw_index(name)
        if index is None or not 0 <= index < expected or index in seen[polarity]:
            logger.warning("Missing, out-of-range or duplicate HW index in %s", path)
            result.mark(TrimFlag.DATA_INVALID, result.invalid, name)
            continue
        seen[polarity].add(index)

        if fsutils.file_size(path) == 0:
            result.empty.append(name)

    check_count(result, "electron", expected, TrimFlag.ELECTRON_COUNT, "electron")
    check_count(result, "hole", expected, TrimFlag.HOLE_COUNT, "hole")
    return result
