"""Interactive cleanup -- removes spurious artifacts found by the first pass."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable

import click

from exorcism import fsutils
from exorcism.checks._common import ELECTRON_SUFFIX, HOLE_SUFFIX
from exorcism.models import CleanupReport, ModuleResults

logger = logging.getLogger("exorcism.cleanup")

# Trim and connection outputs that must never be deleted
PROTECTED_SUFFIXES = (ELECTRON_SUFFIX, HOLE_SUFFIX)

# Run logs are kept whatever category they were found in
NEVER_DELETE_SUFFIX = ".log"

Confirm = Callable[[str], bool]
Notify = Callable[[str], None]


def confirm_on_stdin(prompt: str) -> bool:
    return click.confirm(prompt, default=False)


def is_protected(name: str) -> bool:
    return name.endswith(PROTECTED_SUFFIXES)


class CleanupEngine:
    """Walks the first-pass inventories and deletes what the operator approves.

    ``confirm`` is called once per prompt and must return True to delete.
    """

    def __init__(self, confirm: Confirm | None = None, notify: Notify | None = None) -> None:
        self._confirm = confirm or confirm_on_stdin
        self._notify = notify or click.echo
        self.report = CleanupReport()

    # ── Entry points ──────────────────────────────────────────────────

    def run(self, modules: Iterable[ModuleResults]) -> CleanupReport:
        for results in modules:
            self.clean_module(results)
        logger.info(
            "Cleanup finished: %d deleted, %d failed",
            len(self.report.deleted), len(self.report.failed_deletions),
        )
        return self.report

    def clean_module(self, results: ModuleResults) -> None:
        name = results.module.name
        self._notify(f"\nCleaning module {name}")
        self._clean_invalid_data(results)

        log, pscan = results.log, results.pscan
        self._bulk(f"empty log data files in {name}", log.directory, log.empty)
        self._bulk(f"unexpected files in {name}", log.directory, log.unexpected)
        self._bulk(f"empty pscan files in {name}", pscan.directory, pscan.empty)
        self._bulk(f"module test files with errors in {name}", pscan.directory, pscan.module_errors)
        self._bulk(f"unexpected pscan files in {name}", pscan.directory, pscan.unexpected)

        for result in (results.trim, results.conn):
            names = [n for n in result.unexpected if not is_protected(n)]
            label = result.category.value
            self._bulk(f"unexpected {label} files in {name}", result.directory, names)

    # ── Steps ─────────────────────────────────────────────────────────

    def _clean_invalid_data(self, results: ModuleResults) -> None:
        log = results.log
        for data_name in log.invalid:
            if data_name.endswith(NEVER_DELETE_SUFFIX):
                continue
            tester = log.matches.tester_for(data_name) if log.matches else None
            self._notify(f"Invalid data file: {data_name}")
            self._notify(f"  Matched tester file: {tester or 'none'}")
            if not self._confirm(f"Delete {data_name} and its tester file?"):
                logger.info("Kept invalid data file %s", data_name)
                continue
            self._delete(log.directory / data_name)
            if tester:
                self._delete(log.directory / tester)

    def _bulk(self, label: str, directory: Path, names: list[str]) -> None:
        candidates = [n for n in names if not n.endswith(NEVER_DELETE_SUFFIX)]
        candidates = [n for n in candidates if fsutils.path_exists(directory / n)]
        if not candidates:
            return
        self._notify(f"Found {len(candidates)} {label}:")
        for n in candidates:
            self._notify(f"  - {n}")
        if not self._confirm(f"Delete these {len(candidates)} files?"):
            logger.info("Kept %d %s", len(candidates), label)
            return
        for n in candidates:
            self._delete(directory / n)

    def _delete(self, path: Path) -> None:
        if not fsutils.path_exists(path):
            logger.debug("Already gone, skipping: %s", path)
            self.report.skipped.append(str(path))
            return
        try:
            path.unlink()
        except OSError as exc:
            logger.warning("Failed to delete %s: %s", path, exc)
            self.report.failed_deletions.append(str(path))
            return
        logger.info("Deleted %s", path)
        self.report.deleted.append(str(path))
