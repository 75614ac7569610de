"""Per-category file-set checkers, run in the fixed order Log, Trim, Pscan, Conn."""

from __future__ import annotations

from pathlib import Path

from exorcism.checks.conn import check_conn
from exorcism.checks.log import check_log
from exorcism.checks.pscan import check_pscan
from exorcism.checks.trim import check_trim
from exorcism.config import ExorcismConfig
from exorcism.models import ModuleDir, ModuleResults
from exorcism.scorer import score


def check_module(module: ModuleDir, root: Path, config: ExorcismConfig | None = None) -> ModuleResults:
    """Run all four checkers on one module and score the outcome."""
    config = config or ExorcismConfig()
    expected = config.expected_channels
    results = ModuleResults(
        module=module,
        log=check_log(module.name, root, marker=config.data_marker, min_lines=config.marker_min_lines),
        trim=check_trim(module.name, root, expected=expected),
        pscan=check_pscan(module.name, root, expected=expected),
        conn=check_conn(module.name, root, expected=expected),
    )
    results.status = score(results.log.flags, results.trim.flags, results.pscan.flags, results.conn.flags)
    return results


__all__ = ["check_log", "check_trim", "check_pscan", "check_conn", "check_module"]
