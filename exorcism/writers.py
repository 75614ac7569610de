"""Report writers -- plain text, JSON archive and PDF."""

from __future__ import annotations

import json
import logging
from pathlib import Path

# Force the non-interactive backend so reports render without a display
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages

from exorcism.models import RunState, Status
from exorcism.report import render_text

logger = logging.getLogger("exorcism.writers")

STATUS_COLORS = {
    Status.FAILED: "red",
    Status.PASSED_WITH_ISSUES: "orange",
    Status.PASSED: "green",
}
ERROR_COLOR = "orangered"

PAGE_SIZE = (8.27, 11.69)  # A4, inches
LINES_PER_PAGE = 64


def write_txt(state: RunState, path: Path) -> Path:
    path.write_text(render_text(state), encoding="utf-8")
    logger.info("Text report saved to: %s", path)
    return path


def build_archive(state: RunState) -> dict:
    """Archive layout: ``Directory_<i>`` page texts, the summary, and run metadata."""
    archive: dict = {f"Directory_{i}": page for i, page in enumerate(state.pages)}
    archive["GlobalSummary"] = state.global_summary
    archive["Run"] = state.model_dump(mode="json", exclude={"pages", "global_summary"})
    return archive


def write_json_archive(state: RunState, path: Path) -> Path:
    path.write_text(json.dumps(build_archive(state), indent=2), encoding="utf-8")
    logger.info("JSON archive saved to: %s", path)
    return path


def line_color(line: str) -> str:
    """Pick the colour for one report line, status lines first."""
    if line.startswith("STATUS:"):
        value = line.split(":", 1)[1].strip()
        for status, color in STATUS_COLORS.items():
            if value == status.value:
                return color
    if "ERROR" in line or "WARNING" in line:
        return ERROR_COLOR
    return "black"


def _text_page(pdf: PdfPages, lines: list[str], title: str | None = None) -> None:
    fig = plt.figure(figsize=PAGE_SIZE)
    top = 0.96
    if title:
        fig.text(0.5, top, title, ha="center", va="top", fontsize=14, weight="bold")
        top -= 0.04
    step = (top - 0.03) / LINES_PER_PAGE
    for i, line in enumerate(lines):
        fig.text(
            0.05, top - i * step, line,
            ha="left", va="top", family="monospace", fontsize=7, color=line_color(line),
        )
    pdf.savefig(fig)
    plt.close(fig)


def _paged(lines: list[str]) -> list[list[str]]:
    return [lines[i:i + LINES_PER_PAGE] for i in range(0, len(lines), LINES_PER_PAGE)] or [[]]


def _summary_page(pdf: PdfPages, state: RunState) -> None:
    total = state.total
    counts = [
        (Status.PASSED, state.passed),
        (Status.PASSED_WITH_ISSUES, state.passed_with_issues),
        (Status.FAILED, state.failed),
    ]

    fig = plt.figure(figsize=PAGE_SIZE)
    fig.text(0.5, 0.96, "EXORCISM VALIDATION SUMMARY", ha="center", va="top", fontsize=16, weight="bold")
    fig.text(0.5, 0.92, f"Ladder: {state.ladder}  |  Pass: {state.pass_name.value}", ha="center", va="top", fontsize=11)
    fig.text(0.1, 0.87, f"Total directories: {total}", fontsize=11)
    for i, (status, n) in enumerate(counts):
        pct = 100.0 * n / total if total else 0.0
        fig.text(0.1, 0.83 - i * 0.035, f"{status.value}: {n} ({pct:.1f}%)", fontsize=11, color=STATUS_COLORS[status])

    if total:
        ax = fig.add_axes([0.15, 0.1, 0.7, 0.55])
        ax.pie(
            [n for _, n in counts],
            colors=[STATUS_COLORS[s] for s, _ in counts],
            startangle=90,
        )
        ax.set_aspect("equal")
        ax.legend(
            [f"{s.value}: {n} ({100.0 * n / total:.1f}%)" for s, n in counts],
            loc="lower center",
            bbox_to_anchor=(0.5, -0.15),
            fontsize=9,
        )
    pdf.savefig(fig)
    plt.close(fig)


def write_pdf(state: RunState, path: Path) -> Path:
    with PdfPages(path) as pdf:
        fig = plt.figure(figsize=PAGE_SIZE)
        fig.text(0.5, 0.6, "EXORCISM VALIDATION REPORT", ha="center", fontsize=20, weight="bold")
        fig.text(0.5, 0.54, f"Ladder: {state.ladder}", ha="center", fontsize=14)
        fig.text(0.5, 0.50, f"Pass: {state.pass_name.value}", ha="center", fontsize=12)
        fig.text(0.5, 0.46, f"Generated: {state.generated_at}", ha="center", fontsize=12)
        pdf.savefig(fig)
        plt.close(fig)

        for report in state.modules:
            for chunk in _paged(report.page.splitlines()):
                _text_page(pdf, chunk)

        _summary_page(pdf, state)

        if state.global_summary:
            extra = state.global_summary.splitlines()
            # Cleanup outcome rides along with the after-pass summary
            if any(line.startswith("CLEANUP REPORT") for line in extra):
                for chunk in _paged(extra):
                    _text_page(pdf, chunk, title="Summary")

    plt.close("all")
    logger.info("PDF report saved to: %s", path)
    return path


WRITERS = {
    "txt": write_txt,
    "json": write_json_archive,
    "pdf": write_pdf,
}


def write_reports(state: RunState, output_dir: Path, basename: str, formats: tuple[str, ...]) -> list[Path]:
    """Write every enabled format; a failing writer is logged and skipped."""
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.error("Could not create report directory %s: %s", output_dir, exc)
        return []
    written: list[Path] = []
    for fmt in formats:
        path = output_dir / f"{basename}.{fmt}"
        try:
            written.append(WRITERS[fmt](state, path))
        except OSError as exc:
            logger.error("Could not write %s report %s: %s", fmt, path, exc)
    return written
