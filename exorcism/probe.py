"""Content probe for log-derived data files."""

from __future__ import annotations

import logging
from pathlib import Path

from exorcism.config import DATA_MARKER, MARKER_MIN_LINES

logger = logging.getLogger("exorcism.probe")


def has_config_block(
    path: Path,
    marker: str = DATA_MARKER,
    min_lines: int = MARKER_MIN_LINES,
) -> bool:
    """Check that ``marker`` appears and is followed by ``min_lines`` non-blank lines.

    Only spaces and tabs count as blank. The file is streamed line by line
    and closed on every path; an unreadable file fails the probe.
    """
    try:
        with path.open("r", encoding="utf-8", errors="replace") as fh:
            for line in fh:
                if marker in line:
                    break
            else:
                return False

            seen = 0
            for line in fh:
                if not line.rstrip("\r\n").strip(" \t"):
                    continue
                seen += 1
                if seen >= min_lines:
                    return True
    except OSError as exc:
        logger.debug("Content probe could not read %s: %s", path, exc)
    return False
