"""Shared fixtures: builders for on-disk ladder trees."""

from __future__ import annotations

from pathlib import Path

import pytest

CHANNELS = 8
STAMP = "240823_0940"

VALID_DATA = "header junk\nLV_AFT_CONFIG_P\n  channel 0 = 1.2\n\n  channel 1 = 1.3\n"
INVALID_DATA = "header junk\nno configuration block here\n"

ROOT_BYTES = b"root\x00\x00\x00\x01payload"


def data_name(module: str, i: int, stamp: str = STAMP) -> str:
    return f"{module}_{i}_{stamp}_data.dat"


def tester_name(i: int, stamp: str = STAMP) -> str:
    return f"tester_febs_{i}_{stamp}"


def trim_name(module: str, hw: int, polarity: str) -> str:
    return f"{module}_HW_{hw}_SET_trim_{polarity}.txt"


def build_module(root: Path, name: str = "M") -> Path:
    """Create one ideal module: every artifact present, valid and paired."""
    mod = root / name
    mod.mkdir()
    (mod / f"{name}_log.log").write_text("production run log\n")
    for i in range(CHANNELS):
        (mod / data_name(name, i)).write_text(VALID_DATA)
        (mod / tester_name(i)).write_text("FEB test OK\n")

    trim = mod / "trim_files"
    trim.mkdir()
    for i in range(CHANNELS):
        (trim / trim_name(name, i, "elect")).write_text("trim\n")
        (trim / trim_name(name, i, "holes")).write_text("trim\n")

    pscan = mod / "pscan_files"
    pscan.mkdir()
    for i in range(CHANNELS):
        (pscan / f"{name}_{i}_pscan_elect.txt").write_text("scan\n")
        (pscan / f"{name}_{i}_pscan_holes.txt").write_text("scan\n")
        (pscan / f"{name}_{i}_pscan_elect.root").write_bytes(ROOT_BYTES)
        (pscan / f"{name}_{i}_pscan_holes.root").write_bytes(ROOT_BYTES)
    (pscan / f"module_test_{name}.root").write_bytes(ROOT_BYTES)
    (pscan / f"module_test_{name}.txt").write_text("module summary\n")
    (pscan / f"module_test_{name}.pdf").write_bytes(b"%PDF-1.4\n")

    conn = mod / "conn_check_files"
    conn.mkdir()
    for i in range(CHANNELS):
        (conn / f"{name}_{i}_conn_elect.txt").write_text("conn\n")
        (conn / f"{name}_{i}_conn_holes.txt").write_text("conn\n")
    return mod


@pytest.fixture
def ladder(tmp_path: Path) -> Path:
    """A ladder directory holding one ideal module ``M``."""
    root = tmp_path / "L01"
    root.mkdir()
    build_module(root, "M")
    return root


@pytest.fixture
def module_dir(ladder: Path) -> Path:
    return ladder / "M"
