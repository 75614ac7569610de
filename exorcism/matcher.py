"""Pair binary data files with tester FEB logs by embedded timestamp."""

from __future__ import annotations

import logging

from exorcism.models import FileInfo, MatchMode, MatchReport, Pairing

logger = logging.getLogger("exorcism.matcher")


def match_files(data_files: list[FileInfo], tester_files: list[FileInfo]) -> MatchReport:
    """Match every data file to at most one tester file.

    First an exact pass on equal timestamp tokens, then a nearest-instant
    pass over what is left. Ties in the nearest pass go to the tester that
    comes first. Files without a timestamp never match.
    """
    taken = [False] * len(tester_files)
    pairings: list[Pairing] = [Pairing(data=d.name, mode=MatchMode.UNMATCHED) for d in data_files]

    for i, data in enumerate(data_files):
        if data.timestamp is None:
            continue
        for j, tester in enumerate(tester_files):
            if not taken[j] and tester.timestamp == data.timestamp:
                taken[j] = True
                pairings[i] = Pairing(
                    data=data.name, mode=MatchMode.EXACT, tester=tester.name, delta_seconds=0.0
                )
                break

    for i, data in enumerate(data_files):
        if pairings[i].mode != MatchMode.UNMATCHED or data.instant is None:
            continue
        best: int | None = None
        best_delta = 0.0
        for j, tester in enumerate(tester_files):
            if taken[j] or tester.instant is None:
                continue
            delta = abs(tester.instant - data.instant)
            if best is None or delta < best_delta:
                best, best_delta = j, delta
        if best is not None:
            taken[best] = True
            pairings[i] = Pairing(
                data=data.name,
                mode=MatchMode.NEAREST,
                tester=tester_files[best].name,
                delta_seconds=best_delta,
            )
            logger.info(
                "Nearest match %s -> %s (delta %.0fs)", data.name, tester_files[best].name, best_delta
            )

    report = MatchReport(pairings=pairings)
    for name in report.unmatched:
        logger.warning("No tester FEB file for data file %s", name)
    return report
