"""CheckPscan -- ``pscan_files/``: scan text/ROOT outputs and module test summary."""

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
from exorcism.models import Category, PscanFlag, ValidationResult

logger = logging.getLogger("exorcism.checks.pscan")

PSCAN_DIR = "pscan_files"

ELECTRON_ROOT_SUFFIX = "_elect.root"
HOLE_ROOT_SUFFIX = "_holes.root"

MODULE_TEST_EXTENSIONS = (".root", ".txt", ".pdf")
SETUP_FILES = frozenset(f"module_test_SETUP{ext}" for ext in MODULE_TEST_EXTENSIONS)


def module_test_name(module: str, ext: str) -> str:
    return f"module_test_{module}{ext}"


def check_pscan(
    module: str,
    root: Path | None = None,
    *,
    expected: int = EXPECTED_CHANNELS,
) -> ValidationResult:
    """Validate ``<module>/pscan_files``."""
    pscan_dir = resolve_root(root) / module / PSCAN_DIR
    result = ValidationResult.for_category(Category.PSCAN, pscan_dir)

    if not fsutils.dir_exists(pscan_dir):
        logger.error("Directory 'pscan_files' does not exist: %s", pscan_dir)
        result.mark(PscanFlag.PSCAN_FOLDER_MISSING)
        return result

    _check_module_tests(result, module)

    files = list_or_flag(result, PscanFlag.DIR_ACCESS)
    if files is None:
        return result

    module_prefix = f"module_test_{module}"

    for path in files:
        name = path.name
        if name.endswith(ELECTRON_SUFFIX):
            result.bump("electron_txt")
            probe_text_file(result, path, PscanFlag.FILE_OPEN)
        elif name.endswith(HOLE_SUFFIX):
            result.bump("hole_txt")
            probe_text_file(result, path, PscanFlag.FILE_OPEN)
        elif name.endswith(ELECTRON_ROOT_SUFFIX):
            result.bump("electron_root")
            _probe_root(result, path)
        elif name.endswith(HOLE_ROOT_SUFFIX):
            result.bump("hole_root")
            _probe_root(result, path)
        elif name.startswith(module_prefix) and name.endswith(MODULE_TEST_EXTENSIONS):
            continue
        elif name in SETUP_FILES:
            continue
        else:
            logger.warning("Unexpected file in pscan_files: %s", path)
            result.mark(PscanFlag.UNEXPECTED_FILES, result.unexpected, name)

    check_count(result, "electron_txt", expected, PscanFlag.ELECTRON_TXT, "electron txt")
    check_count(result, "hole_txt", expected, PscanFlag.HOLE_TXT, "hole txt")
    check_count(result, "electron_root", expected, PscanFlag.ELECTRON_ROOT, "electron root")
    check_count(result, "hole_root", expected, PscanFlag.HOLE_ROOT, "hole root")
    return result


def _probe_root(result: ValidationResult, path: Path) -> None:
    if not fsutils.is_root_file(path):
        logger.warning("Cannot open ROOT file: %s", path)
        result.mark(PscanFlag.FILE_OPEN, result.open_errors, path.name)


def _check_module_tests(result: ValidationResult, module: str) -> None:
    """Existence and readability of the three module test summary files."""
    pscan_dir = result.directory

    root_path = pscan_dir / module_test_name(module, ".root")
    if not fsutils.file_exists(root_path):
        logger.warning("Module test root file is missing or inaccessible: %s", root_path)
        result.mark(PscanFlag.MODULE_ROOT, result.module_errors, root_path.name)
    elif not fsutils.is_root_file(root_path):
        logger.warning("Cannot open module test root file: %s", root_path)
        result.mark(PscanFlag.MODULE_ROOT, result.module_errors, root_path.name)

    txt_path = pscan_dir / module_test_name(module, ".txt")
    if not fsutils.file_exists(txt_path):
        logger.warning("Module test txt file is missing or inaccessible: %s", txt_path)
        result.mark(PscanFlag.MODULE_TXT, result.module_errors, txt_path.name)
    elif not fsutils.can_open(txt_path):
        logger.warning("Cannot open module test txt file: %s", txt_path)
        result.mark(PscanFlag.MODULE_TXT, result.module_errors, txt_path.name)
    elif fsutils.file_size(txt_path) == 0:
        result.empty.append(txt_path.name)

    pdf_path = pscan_dir / module_test_name(module, ".pdf")
    if not fsutils.file_exists(pdf_path):
        logger.warning("Module test pdf file is missing or inaccessible: %s", pdf_path)
        result.mark(PscanFlag.MODULE_PDF, result.module_errors, pdf_path.name)
