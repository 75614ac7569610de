"""CheckConn -- ``conn_check_files/``: connectivity check outputs."""

from __future__ import annotations

import logging
from pathlib import Path

from exorcism import fsutils
from exorcism.checks._common import (
    ELECTRON_SUFFIX,
    HOLE_SUFFIX,
    check_count,
    list_or_flag,
    probe_text_file,
    resolve_root,
)
from exorcism.config import EXPECTED_CHANNELS
from exorcism.models import Category, ConnFlag, ValidationResult

logger = logging.getLogger("exorcism.checks.conn")

CONN_DIR = "conn_check_files"


def check_conn(
    module: str,
    root: Path | None = None,
    *,
    expected: int = EXPECTED_CHANNELS,
) -> ValidationResult:
    """Validate ``<module>/conn_check_files``."""
    conn_dir = resolve_root(root) / module / CONN_DIR
    result = ValidationResult.for_category(Category.CONN, conn_dir)

    if not fsutils.dir_exists(conn_dir):
        logger.error("Directory 'conn_check_files' does not exist: %s", conn_dir)
        result.mark(ConnFlag.CONN_FOLDER_MISSING)
        return result

    files = list_or_flag(result, ConnFlag.DIR_ACCESS)
    if files is None:
        return result

    for path in files:
        if path.name.endswith(ELECTRON_SUFFIX):
            result.bump("electron")
        elif path.name.endswith(HOLE_SUFFIX):
            result.bump("hole")
        else:
            logger.warning("Unexpected file in conn_check_files: %s", path)
            result.mark(ConnFlag.UNEXPECTED_FILES, result.unexpected, path.name)
            continue
        probe_text_file(result, path, ConnFlag.FILE_OPEN)

    check_count(result, "electron", expected, ConnFlag.ELECTRON_COUNT, "electron")
    check_count(result, "hole", expected, ConnFlag.HOLE_COUNT, "hole")
    return result
