"""Operator experience -- formatted console output for Exorcism runs."""

from __future__ import annotations

import json
import sys
from datetime import datetime
from typing import Any

from exorcism.models import ModuleResults, RunState

SEPARATOR = "=" * 63
THIN_SEP = "-" * 63


class Display:
    """Formats and prints operator-facing console output."""

    def __init__(self, log_format: str = "text", file: Any = None):
        self._fmt = log_format  # "text" or "json"
        self._file = file or sys.stdout

    def _now(self) -> str:
        return datetime.now().strftime("%H:%M:%S")

    def _print(self, text: str) -> None:
        print(text, file=self._file, flush=True)

    def _json_line(self, **kwargs: Any) -> None:
        kwargs.setdefault("ts", datetime.now().isoformat())
        print(json.dumps(kwargs, default=str), file=self._file, flush=True)

    # ── Startup Banner ────────────────────────────────────────────────

    def banner(self, *, version: str, ladder: str, root: str, modules: int) -> None:
        if self._fmt == "json":
            self._json_line(event="run_started", version=version, ladder=ladder, root=root, modules=modules)
            return

        self._print(f"\n{SEPARATOR}")
        self._print(f"  Exorcism -- Ladder Artifact Validator  v{version}")
        self._print(f"  Ladder:   {ladder}")
        self._print(f"  Root:     {root}")
        self._print(f"  Modules:  {modules}")
        self._print(f"{SEPARATOR}\n")

    # ── Rolling Log ───────────────────────────────────────────────────

    def log(self, state: str, message: str, details: list[str] | None = None) -> None:
        if self._fmt == "json":
            self._json_line(event="log", state=state, detail=message)
            return

        self._print(f"[{self._now()}] {state:<20s} {message}")
        if details:
            for i, d in enumerate(details):
                prefix = "|--" if i < len(details) - 1 else "`--"
                self._print(f"{'':>31s}{prefix} {d}")

    def module_result(self, state: str, results: ModuleResults) -> None:
        if self._fmt == "json":
            self._json_line(
                event="module_validated", state=state, module=results.module.name,
                status=results.status.value,
                flags={r.category.value: r.summary for r in results.all()},
            )
            return

        details = [f"{r.category.value:<6s} {r.summary}" for r in results.all()]
        self.log(state, f"{results.module.name}: {results.status.value}", details)

    # ── Final Summary Banner ──────────────────────────────────────────

    def summary_banner(self, state: RunState, reports: list[str]) -> None:
        if self._fmt == "json":
            self._json_line(
                event="pass_complete", ladder=state.ladder, pass_name=state.pass_name.value,
                total=state.total, passed=state.passed,
                passed_with_issues=state.passed_with_issues, failed=state.failed,
                reports=reports,
            )
            return

        self._print(f"\n{SEPARATOR}")
        self._print(f"  Exorcism Pass Complete ({state.pass_name.value})")
        self._print(THIN_SEP)
        self._print(f"  Directories:        {state.total}")
        self._print(f"  Passed:             {state.passed}")
        self._print(f"  Passed with issues: {state.passed_with_issues}")
        self._print(f"  Failed:             {state.failed}")
        if reports:
            self._print(THIN_SEP)
            for path in reports:
                self._print(f"  Report: {path}")
        self._print(f"{SEPARATOR}\n")
