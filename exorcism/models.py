"""Data models for Exorcism validation results, matching, and run reporting."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntFlag
from pathlib import Path

from pydantic import BaseModel, Field


# ── Status and lifecycle ──────────────────────────────────────────────

class Status(str, Enum):
    PASSED = "PASSED"
    PASSED_WITH_ISSUES = "PASSED WITH ISSUES"
    FAILED = "FAILED"


class ModuleState(str, Enum):
    UNSEEN = "UNSEEN"
    VALIDATED = "VALIDATED"
    CLEANED = "CLEANED"
    REVALIDATED = "REVALIDATED"
    DONE = "DONE"


class Category(str, Enum):
    LOG = "log"
    TRIM = "trim"
    PSCAN = "pscan"
    CONN = "conn"


class Pass(str, Enum):
    BEFORE = "before"
    AFTER = "after"


# ── Per-category error flags ─────────────────────────────────────────

class LogFlag(IntFlag):
    DIR_MISSING = 0x01
    LOG_MISSING = 0x02
    DATA_MISSING = 0x04
    NO_FEB_FILE = 0x08
    FILE_OPEN = 0x10
    DATA_EMPTY = 0x20
    DATA_INVALID = 0x40
    UNEXPECTED_FILES = 0x80


class TrimFlag(IntFlag):
    TRIM_FOLDER_MISSING = 0x01
    DIR_ACCESS = 0x02
    ELECTRON_COUNT = 0x04
    HOLE_COUNT = 0x08
    FILE_OPEN = 0x10
    DATA_INVALID = 0x20
    UNEXPECTED_FILES = 0x40


class PscanFlag(IntFlag):
    PSCAN_FOLDER_MISSING = 0x01
    DIR_ACCESS = 0x02
    ELECTRON_TXT = 0x04
    HOLE_TXT = 0x08
    ELECTRON_ROOT = 0x10
    HOLE_ROOT = 0x20
    FILE_OPEN = 0x40
    MODULE_ROOT = 0x80
    MODULE_TXT = 0x100
    MODULE_PDF = 0x200
    UNEXPECTED_FILES = 0x400


class ConnFlag(IntFlag):
    CONN_FOLDER_MISSING = 0x01
    DIR_ACCESS = 0x02
    ELECTRON_COUNT = 0x04
    HOLE_COUNT = 0x08
    FILE_OPEN = 0x10
    UNEXPECTED_FILES = 0x20


FLAG_TYPES: dict[Category, type[IntFlag]] = {
    Category.LOG: LogFlag,
    Category.TRIM: TrimFlag,
    Category.PSCAN: PscanFlag,
    Category.CONN: ConnFlag,
}


def decode_flags(flags: IntFlag) -> str:
    """Render a flag set as ``A | B`` in bit order, or ``OK`` when clear."""
    if not flags:
        return "OK"
    names = [member.name for member in type(flags) if member & flags]
    return " | ".join(names)


# ── Engine results ────────────────────────────────────────────────────

@dataclass
class ModuleDir:
    """One module subdirectory of the ladder."""

    name: str
    path: Path


@dataclass
class FileInfo:
    """A data or tester file annotated with its embedded timestamp."""

    path: Path
    name: str
    timestamp: str | None = None
    instant: float | None = None


class MatchMode(str, Enum):
    EXACT = "exact"
    NEAREST = "nearest"
    UNMATCHED = "unmatched"


@dataclass
class Pairing:
    """Outcome of matching one data file against the tester logs."""

    data: str
    mode: MatchMode
    tester: str | None = None
    delta_seconds: float | None = None


@dataclass
class MatchReport:
    """All pairings for one module, in data-file input order."""

    pairings: list[Pairing] = field(default_factory=list)

    def by_mode(self, mode: MatchMode) -> list[Pairing]:
        return [p for p in self.pairings if p.mode == mode]

    @property
    def unmatched(self) -> list[str]:
        return [p.data for p in self.by_mode(MatchMode.UNMATCHED)]

    def tester_for(self, data_name: str) -> str | None:
        for p in self.pairings:
            if p.data == data_name:
                return p.tester
        return None


@dataclass
class ValidationResult:
    """Bitmask and inventories produced by one category checker.

    Inventories hold file basenames relative to ``directory``; a name lands
    in at most one of them.
    """

    category: Category
    flags: IntFlag
    directory: Path
    counts: dict[str, int] = field(default_factory=dict)
    open_errors: list[str] = field(default_factory=list)
    unexpected: list[str] = field(default_factory=list)
    empty: list[str] = field(default_factory=list)
    invalid: list[str] = field(default_factory=list)
    module_errors: list[str] = field(default_factory=list)
    matches: MatchReport | None = None

    @classmethod
    def for_category(cls, category: Category, directory: Path) -> ValidationResult:
        return cls(category=category, flags=FLAG_TYPES[category](0), directory=directory)

    def mark(self, flag: IntFlag, inventory: list[str] | None = None, name: str | None = None) -> None:
        """Set ``flag`` and, when given, record ``name`` in ``inventory``."""
        self.flags |= flag
        if inventory is not None and name is not None and name not in inventory:
            inventory.append(name)

    def bump(self, counter: str) -> None:
        self.counts[counter] = self.counts.get(counter, 0) + 1

    def count(self, counter: str) -> int:
        return self.counts.get(counter, 0)

    @property
    def summary(self) -> str:
        return decode_flags(self.flags)


@dataclass
class ModuleResults:
    """The four category results for one module, in checker order."""

    module: ModuleDir
    log: ValidationResult
    trim: ValidationResult
    pscan: ValidationResult
    conn: ValidationResult
    status: Status = Status.PASSED

    def all(self) -> list[ValidationResult]:
        return [self.log, self.trim, self.pscan, self.conn]


# ── Run reporting (serialised) ───────────────────────────────────────

class ModuleReport(BaseModel):
    name: str
    status: Status
    flags: dict[str, str] = {}
    page: str = ""


class CleanupReport(BaseModel):
    deleted: list[str] = []
    failed_deletions: list[str] = []
    skipped: list[str] = []

    def render(self) -> str:
        lines = ["CLEANUP REPORT", "-" * 52]
        lines.append(f"Deleted files: {len(self.deleted)}")
        lines.extend(f" - {path}" for path in self.deleted)
        lines.append(f"Failed deletions: {len(self.failed_deletions)}")
        lines.extend(f" - {path}" for path in self.failed_deletions)
        return "\n".join(lines) + "\n"


class RunState(BaseModel):
    """Accumulated per-pass state owned by the driver."""

    ladder: str = ""
    pass_name: Pass = Pass.BEFORE
    generated_at: str = Field(default_factory=lambda: datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
    pages: list[str] = []
    modules: list[ModuleReport] = []
    global_summary: str = ""
    passed: int = 0
    passed_with_issues: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.passed + self.passed_with_issues + self.failed

    def record(self, report: ModuleReport) -> None:
        self.modules.append(report)
        self.pages.append(report.page)
        if report.status == Status.PASSED:
            self.passed += 1
        elif report.status == Status.PASSED_WITH_ISSUES:
            self.passed_with_issues += 1
        else:
            self.failed += 1

    @property
    def all_passed(self) -> bool:
        return self.total > 0 and self.passed == self.total
