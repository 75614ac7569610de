"""CheckLog -- module root: run log, binary data files, tester FEB logs."""

from __future__ import annotations

import logging
from pathlib import Path

from exorcism import fsutils
from exorcism.checks._common import resolve_root
from exorcism.config import DATA_MARKER, MARKER_MIN_LINES
from exorcism.matcher import match_files
from exorcism.models import Category, FileInfo, LogFlag, ValidationResult
from exorcism.probe import has_config_block
from exorcism.timestamps import annotate

logger = logging.getLogger("exorcism.checks.log")

DATA_SUFFIX = "_data.dat"
TESTER_PREFIX = "tester_febs_"


def log_filename(module: str) -> str:
    return f"{module}_log.log"


def is_data_file(module: str, name: str) -> bool:
    return name.startswith(module) and name.endswith(DATA_SUFFIX)


def check_log(
    module: str,
    root: Path | None = None,
    *,
    marker: str = DATA_MARKER,
    min_lines: int = MARKER_MIN_LINES,
) -> ValidationResult:
    """Validate the files at the top level of ``module``."""
    module_dir = resolve_root(root) / module
    result = ValidationResult.for_category(Category.LOG, module_dir)

    if not fsutils.dir_exists(module_dir):
        logger.error("Target directory does not exist: %s", module_dir)
        result.mark(LogFlag.DIR_MISSING)
        return result

    log_path = module_dir / log_filename(module)
    present = fsutils.file_exists(log_path)
    if present is None:
        result.counts["log_found"] = 0
        logger.warning("Cannot access log file: %s", log_path)
        result.mark(LogFlag.FILE_OPEN, result.open_errors, log_path.name)
    elif present:
        result.counts["log_found"] = 1
        if not fsutils.can_open(log_path):
            logger.warning("Cannot open log file: %s", log_path)
            result.mark(LogFlag.FILE_OPEN, result.open_errors, log_path.name)
    else:
        result.counts["log_found"] = 0
        logger.warning("Log file does not exist: %s", log_path)
        result.mark(LogFlag.LOG_MISSING)

    try:
        files = fsutils.list_files(module_dir)
    except OSError as exc:
        logger.error("Could not read directory contents: %s (%s)", module_dir, exc)
        result.mark(LogFlag.FILE_OPEN)
        return result

    data_files: list[FileInfo] = []
    tester_files: list[FileInfo] = []

    for path in files:
        name = path.name
        if name == log_path.name:
            continue

        if is_data_file(module, name):
            result.bump("data_files")
            data_files.append(annotate(path))
            _check_data_file(result, path, marker, min_lines)
        elif name.startswith(TESTER_PREFIX):
            result.bump("tester_files")
            tester_files.append(annotate(path))
            if not fsutils.can_open(path):
                logger.warning("Cannot open FEB file: %s", path)
                result.mark(LogFlag.FILE_OPEN, result.open_errors, name)
        else:
            logger.warning("Unexpected file found: %s", path)
            result.mark(LogFlag.UNEXPECTED_FILES, result.unexpected, name)

    if not data_files:
        logger.error("No data files found in %s", module_dir)
        result.mark(LogFlag.DATA_MISSING)

    result.matches = match_files(data_files, tester_files)
    if result.matches.unmatched:
        result.mark(LogFlag.NO_FEB_FILE)

    return result


def _check_data_file(result: ValidationResult, path: Path, marker: str, min_lines: int) -> None:
    size = fsutils.file_size(path)
    if size is None or not fsutils.can_open(path):
        logger.warning("Cannot open data file: %s", path)
        result.mark(LogFlag.FILE_OPEN, result.open_errors, path.name)
        return
    if size == 0:
        logger.warning("Empty data file: %s", path)
        result.mark(LogFlag.DATA_EMPTY, result.empty, path.name)
        return
    result.bump("non_empty")
    if has_config_block(path, marker, min_lines):
        result.bump("valid")
    else:
        logger.warning("Invalid content in data file: %s", path)
        result.mark(LogFlag.DATA_INVALID, result.invalid, path.name)
