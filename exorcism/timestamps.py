"""Timestamp extraction from data and tester file names."""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path

from exorcism.models import FileInfo

# DDMMYY_HHMM, first occurrence wins
_TIMESTAMP_PATTERN = re.compile(r"(\d{2})(\d{2})(\d{2})_(\d{2})(\d{2})")


def parse_timestamp(name: str) -> tuple[str, float] | None:
    """Return the ``DDMMYY_HHMM`` token of ``name`` and its local epoch time.

    None when there is no token or its fields do not form a valid date.
    """
    match = _TIMESTAMP_PATTERN.search(name)
    if not match:
        return None
    day, month, year, hour, minute = (int(g) for g in match.groups())
    try:
        moment = datetime(2000 + year, month, day, hour, minute)
    except ValueError:
        return None
    # Naive datetimes resolve through the local zone, DST included.
    return match.group(0), moment.timestamp()


def annotate(path: Path) -> FileInfo:
    parsed = parse_timestamp(path.name)
    if parsed is None:
        return FileInfo(path=path, name=path.name)
    token, instant = parsed
    return FileInfo(path=path, name=path.name, timestamp=token, instant=instant)
