"""Tri-state module scoring from the four category bitmasks."""

from __future__ import annotations

from enum import IntFlag

from exorcism.models import ConnFlag, LogFlag, PscanFlag, Status, TrimFlag

FAILURE_BITS: dict[type[IntFlag], IntFlag] = {
    LogFlag: (
        LogFlag.DIR_MISSING
        | LogFlag.LOG_MISSING
        | LogFlag.DATA_MISSING
        | LogFlag.NO_FEB_FILE
        | LogFlag.FILE_OPEN
        | LogFlag.DATA_INVALID
    ),
    TrimFlag: (
        TrimFlag.TRIM_FOLDER_MISSING
        | TrimFlag.DIR_ACCESS
        | TrimFlag.ELECTRON_COUNT
        | TrimFlag.HOLE_COUNT
        | TrimFlag.FILE_OPEN
        | TrimFlag.DATA_INVALID
    ),
    PscanFlag: (
        PscanFlag.PSCAN_FOLDER_MISSING
        | PscanFlag.DIR_ACCESS
        | PscanFlag.ELECTRON_TXT
        | PscanFlag.HOLE_TXT
        | PscanFlag.ELECTRON_ROOT
        | PscanFlag.HOLE_ROOT
        | PscanFlag.FILE_OPEN
        | PscanFlag.MODULE_ROOT
        | PscanFlag.MODULE_TXT
        | PscanFlag.MODULE_PDF
    ),
    ConnFlag: (
        ConnFlag.CONN_FOLDER_MISSING
        | ConnFlag.DIR_ACCESS
        | ConnFlag.ELECTRON_COUNT
        | ConnFlag.HOLE_COUNT
        | ConnFlag.FILE_OPEN
    ),
}

ISSUE_BITS: dict[type[IntFlag], IntFlag] = {
    LogFlag: LogFlag.DATA_EMPTY | LogFlag.UNEXPECTED_FILES,
    TrimFlag: TrimFlag.UNEXPECTED_FILES,
    PscanFlag: PscanFlag.UNEXPECTED_FILES,
    ConnFlag: ConnFlag.UNEXPECTED_FILES,
}


def score(log: LogFlag, trim: TrimFlag, pscan: PscanFlag, conn: ConnFlag) -> Status:
    """Map the four category bitmasks to one module status."""
    masks = (LogFlag(log), TrimFlag(trim), PscanFlag(pscan), ConnFlag(conn))
    if any(mask & FAILURE_BITS[type(mask)] for mask in masks):
        return Status.FAILED
    if any(mask & ISSUE_BITS[type(mask)] for mask in masks):
        return Status.PASSED_WITH_ISSUES
    return Status.PASSED
