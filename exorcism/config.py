"""Exorcism configuration -- layered: CLI flags > defaults."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger("exorcism.config")

# Eight sensor channels per module
EXPECTED_CHANNELS = 8

DATA_MARKER = "LV_AFT_CONFIG_P"
MARKER_MIN_LINES = 2

REPORT_FORMATS = ("txt", "json", "pdf")


@dataclass
class ExorcismConfig:
    """Configuration for an Exorcism run."""

    # Validation
    expected_channels: int = EXPECTED_CHANNELS
    data_marker: str = DATA_MARKER
    marker_min_lines: int = MARKER_MIN_LINES

    # Cleanup
    skip_cleanup: bool = False
    assume_yes: bool = False

    # Reports
    report_prefix: str = "ExorcismReport"
    output_dir: str | None = None
    formats: tuple[str, ...] = field(default_factory=lambda: REPORT_FORMATS)

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None
    log_format: str = "text"

    def __post_init__(self) -> None:
        unknown = [f for f in self.formats if f not in REPORT_FORMATS]
        if unknown:
            logger.warning("Ignoring unknown report format(s): %s", ", ".join(unknown))
        self.formats = tuple(f for f in self.formats if f in REPORT_FORMATS)

    def resolve_output_dir(self, ladder_root: Path) -> Path:
        """Directory the reports are written to (the ladder root by default)."""
        if self.output_dir:
            return Path(self.output_dir)
        return ladder_root

    def report_basename(self, ladder: str, stamp: str, pass_name: str) -> str:
        return f"{self.report_prefix}_{ladder}_{stamp}_{pass_name}"
