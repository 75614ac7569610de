"""Report composition -- per-module pages and the ladder summary."""

from __future__ import annotations

from exorcism.config import EXPECTED_CHANNELS
from exorcism.models import (
    CleanupReport,
    LogFlag,
    MatchMode,
    ModuleReport,
    ModuleResults,
    PscanFlag,
    RunState,
    ValidationResult,
)

SEPARATOR = "=" * 52

_SECTION_LABELS = {
    "log": "Log",
    "trim": "Trim",
    "pscan": "Pscan",
    "conn": "Connection",
}


def _file_list(title: str, names: list[str], indent: str = " ") -> list[str]:
    if not names:
        return []
    return ["", f"{title}:"] + [f"{indent}- {n}" for n in names]


def _log_section(log: ValidationResult) -> list[str]:
    total = log.count("data_files")
    if log.flags & LogFlag.DATA_MISSING:
        data_state = "NONE"
    elif log.flags & LogFlag.DATA_EMPTY:
        data_state = "SOME EMPTY"
    elif log.flags & LogFlag.DATA_INVALID:
        data_state = "SOME INVALID"
    else:
        data_state = "VALID"

    lines = [
        "",
        "[LOG FILES]",
        f"Checks: {log.summary}",
        f"Data files: {total} found | {data_state}",
        f"Non-empty files: {log.count('non_empty')}/{total}",
        f"Valid files: {log.count('valid')}/{total}",
        f"Tester FEB files: {log.count('tester_files')}",
        f"Log file: {'FOUND' if log.count('log_found') else 'MISSING'}",
    ]
    if log.matches is not None and log.matches.pairings:
        lines.append("")
        lines.append("Data/tester pairing:")
        for p in log.matches.pairings:
            if p.mode == MatchMode.UNMATCHED:
                lines.append(f" - {p.data} -> NO TESTER FILE")
            elif p.mode == MatchMode.NEAREST:
                lines.append(f" - {p.data} -> {p.tester} (nearest, {p.delta_seconds:.0f}s)")
            else:
                lines.append(f" - {p.data} -> {p.tester}")
    lines += _file_list("Empty log data files", log.empty)
    lines += _file_list("Invalid log data files", log.invalid)
    return lines


def _pair_section(title: str, result: ValidationResult, expected: int) -> list[str]:
    lines = [
        "",
        title,
        f"Checks: {result.summary}",
        f"Electron files: {result.count('electron')}/{expected}",
        f"Hole files: {result.count('hole')}/{expected}",
    ]
    label = _SECTION_LABELS[result.category.value].lower()
    lines += _file_list(f"Empty {label} files", result.empty)
    lines += _file_list(f"Invalid {label} files", result.invalid)
    return lines


def _pscan_section(pscan: ValidationResult, expected: int) -> list[str]:
    module_bits = PscanFlag.MODULE_ROOT | PscanFlag.MODULE_TXT | PscanFlag.MODULE_PDF
    lines = [
        "",
        "[PSCAN FILES]",
        f"Checks: {pscan.summary}",
        f"Electron text: {pscan.count('electron_txt')}/{expected}",
        f"Hole text: {pscan.count('hole_txt')}/{expected}",
        f"Electron root: {pscan.count('electron_root')}/{expected}",
        f"Hole root: {pscan.count('hole_root')}/{expected}",
        f"Module files: {'ERROR' if pscan.flags & module_bits else 'OK'}",
    ]
    lines += _file_list("Empty pscan files", pscan.empty)
    lines += _file_list("Module test file errors", pscan.module_errors)
    return lines


def _grouped(title: str, results: list[ValidationResult], attr: str, suffix: str) -> list[str]:
    groups = [(r, getattr(r, attr)) for r in results if getattr(r, attr)]
    if not groups:
        return []
    lines = ["", title]
    for result, names in groups:
        lines.append(f"{_SECTION_LABELS[result.category.value]} {suffix}:")
        lines.extend(f"  - {n}" for n in names)
    return lines


def build_module_report(results: ModuleResults, expected: int = EXPECTED_CHANNELS) -> ModuleReport:
    """Render one module's results as a report page."""
    name = results.module.name
    lines = [
        SEPARATOR,
        f"VALIDATION REPORT FOR: {name}",
        SEPARATOR,
        f"STATUS: {results.status.value}",
    ]
    lines += _log_section(results.log)
    lines += _pair_section("[TRIM FILES]", results.trim, expected)
    lines += _pscan_section(results.pscan, expected)
    lines += _pair_section("[CONNECTION FILES]", results.conn, expected)

    all_results = results.all()
    lines += _grouped("[FILE OPEN ERRORS]", all_results, "open_errors", "file errors")
    lines += _grouped("[UNEXPECTED FILES]", all_results, "unexpected", "directory unexpected files")

    return ModuleReport(
        name=name,
        status=results.status,
        flags={r.category.value: r.summary for r in all_results},
        page="\n".join(lines) + "\n",
    )


def build_global_summary(state: RunState, cleanup: CleanupReport | None = None) -> str:
    total = state.total
    rate = 100.0 * (state.passed + state.passed_with_issues) / total if total else 0.0
    lines = [
        "",
        SEPARATOR,
        "EXORCISM VALIDATION SUMMARY",
        SEPARATOR,
        f"Ladder:             {state.ladder}",
        f"Pass:               {state.pass_name.value}",
        f"Total directories:  {total}",
        f"Passed:             {state.passed}",
        f"Passed with issues: {state.passed_with_issues}",
        f"Failed:             {state.failed}",
        f"Success rate:       {rate:.1f}%",
        SEPARATOR,
    ]
    text = "\n".join(lines) + "\n"
    if cleanup is not None:
        text += "\n" + cleanup.render()
    return text


def render_text(state: RunState) -> str:
    """Full plain-text report: header, module pages, then the summary."""
    parts = [
        "EXORCISM VALIDATION REPORT\n",
        f"Ladder: {state.ladder}\n",
        f"Generated: {state.generated_at}\n",
        SEPARATOR + "\n\n",
    ]
    for page in state.pages:
        parts.append(page + "\n\n")
    parts.append(state.global_summary)
    return "".join(parts)
