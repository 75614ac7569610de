"""Lifecycle controller -- validate, clean up, validate again."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from exorcism import __version__, fsutils
from exorcism.checks import check_module
from exorcism.cleanup import CleanupEngine, Confirm
from exorcism.config import ExorcismConfig
from exorcism.display import Display
from exorcism.models import CleanupReport, ModuleDir, ModuleResults, ModuleState, Pass, RunState
from exorcism.report import build_global_summary, build_module_report
from exorcism.writers import write_reports

logger = logging.getLogger("exorcism.lifecycle")


class WorkspaceError(OSError):
    """The working directory itself cannot be read."""


def discover_modules(root: Path) -> list[ModuleDir]:
    """Immediate, non-hidden subdirectories of ``root`` in name order."""
    try:
        dirs = fsutils.list_subdirectories(root)
    except OSError as exc:
        raise WorkspaceError(f"Cannot read working directory {root}: {exc}") from exc
    return [ModuleDir(name=d.name, path=d) for d in dirs]


def _always_yes(prompt: str) -> bool:
    logger.info("%s [auto-confirmed]", prompt)
    return True


class LifecycleController:
    """Drives one Exorcism run through both validation passes.

    Each module moves ``UNSEEN -> VALIDATED -> CLEANED -> REVALIDATED -> DONE``.
    With cleanup disabled the ``CLEANED`` step is skipped.
    """

    def __init__(
        self,
        config: ExorcismConfig,
        root: Path,
        *,
        display: Display | None = None,
        confirm: Confirm | None = None,
    ):
        self.config = config
        self.root = Path(root).resolve()
        self.ladder = self.root.name
        # One stamp per run so the before/after reports pair up
        self.stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.states: dict[str, ModuleState] = {}
        self.transitions: dict[str, list[ModuleState]] = {}
        self.reports: dict[Pass, list[Path]] = {}
        self.cleanup_report: CleanupReport | None = None

        self._display = display or Display(config.log_format)
        if config.assume_yes:
            confirm = _always_yes
        self._confirm = confirm

    def _set_state(self, module: str, new_state: ModuleState) -> None:
        self.states[module] = new_state
        self.transitions.setdefault(module, []).append(new_state)
        logger.debug("%s state -> %s", module, new_state.value)

    # ── Passes ────────────────────────────────────────────────────────

    def validate_pass(
        self,
        modules: list[ModuleDir],
        pass_name: Pass,
        cleanup: CleanupReport | None = None,
    ) -> tuple[RunState, list[ModuleResults]]:
        """Check every module, accumulate pages and counters, compose the summary."""
        state = RunState(ladder=self.ladder, pass_name=pass_name)
        all_results: list[ModuleResults] = []
        label = f"VALIDATING_{pass_name.value.upper()}"

        for module in modules:
            logger.info("Validating module %s (%s)", module.name, pass_name.value)
            results = check_module(module, self.root, self.config)
            state.record(build_module_report(results, self.config.expected_channels))
            all_results.append(results)
            self._display.module_result(label, results)

        state.global_summary = build_global_summary(state, cleanup)
        logger.info(
            "Pass %s: %d passed, %d passed with issues, %d failed",
            pass_name.value, state.passed, state.passed_with_issues, state.failed,
        )
        return state, all_results

    def write_pass_reports(self, state: RunState) -> list[Path]:
        basename = self.config.report_basename(self.ladder, self.stamp, state.pass_name.value)
        output_dir = self.config.resolve_output_dir(self.root)
        written = write_reports(state, output_dir, basename, self.config.formats)
        self.reports[state.pass_name] = written
        self._display.summary_banner(state, [str(p) for p in written])
        return written

    def run_cleanup(self, results: list[ModuleResults]) -> CleanupReport:
        if self.config.skip_cleanup:
            logger.warning("Cleanup skipped (--no-cleanup)")
            report = CleanupReport()
        else:
            self._display.log("CLEANING_UP", f"Reviewing {len(results)} module(s) for spurious files")
            report = CleanupEngine(confirm=self._confirm).run(results)
            for r in results:
                self._set_state(r.module.name, ModuleState.CLEANED)
        return report

    # ── Entry point ───────────────────────────────────────────────────

    def run(self) -> int:
        """Execute both passes. Returns the process exit code (0 or 1)."""
        modules = discover_modules(self.root)
        if not modules:
            logger.warning("No module directories found in %s", self.root)
            return 1

        for m in modules:
            self._set_state(m.name, ModuleState.UNSEEN)
        self._display.banner(version=__version__, ladder=self.ladder, root=str(self.root), modules=len(modules))

        before, results = self.validate_pass(modules, Pass.BEFORE)
        for m in modules:
            self._set_state(m.name, ModuleState.VALIDATED)
        self.write_pass_reports(before)

        self.cleanup_report = self.run_cleanup(results)

        after, _ = self.validate_pass(
            modules, Pass.AFTER, None if self.config.skip_cleanup else self.cleanup_report
        )
        for m in modules:
            self._set_state(m.name, ModuleState.REVALIDATED)
        self.write_pass_reports(after)

        for m in modules:
            self._set_state(m.name, ModuleState.DONE)
        return 0 if after.all_passed else 1
