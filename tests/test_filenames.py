"""Tests for log filename parsing and region/channel mapping."""

from __future__ import annotations

from datetime import date

import pytest

from asrun_ingest.asrun.filenames import map_channel, map_region, parse_log_filename
from asrun_ingest.infra.exceptions import FilenameError
from asrun_ingest.shared.types import Channel, Region


def test_parse_with_prefix_path():
    meta = parse_log_filename("logs/2026/01/20260104_BRI-NINE.LOG")
    assert meta.broadcast_date == date(2026, 1, 4)
    assert meta.region is Region.BNE
    assert meta.channel is Channel.CH9
    assert meta.filename == "20260104_BRI-NINE.LOG"


def test_parse_case_insensitive():
    meta = parse_log_filename("20260104_ade-gem.log")
    assert meta.region is Region.ADL
    assert meta.channel is Channel.GEM


def test_parse_windows_path():
    assert parse_log_filename(r"C:\logs\20260104_SYD-GO.LOG").channel is Channel.GO


@pytest.mark.parametrize(
    "key",
    [
        "notes.txt",
        "20260104_SYD.LOG",
        "20260104_XXX-NINE.LOG",
        "20260104_SYD-SEVEN.LOG",
        "20261399_SYD-NINE.LOG",
    ],
)
def test_rejected_filenames(key):
    with pytest.raises(FilenameError):
        parse_log_filename(key)


@pytest.mark.parametrize(
    ("code", "expected"),
    [("SYD", Region.SYD), ("mel", Region.MEL), ("BRI", Region.BNE), ("BNE", Region.BNE),
     ("PER", Region.PER), ("ADE", Region.ADL), ("ADL", Region.ADL), ("HOB", None)],
)
def test_map_region(code, expected):
    assert map_region(code) is expected


@pytest.mark.parametrize(
    ("code", "expected"),
    [("NINE", Channel.CH9), ("go", Channel.GO), ("GEM", Channel.GEM), ("CH9", None)],
)
def test_map_channel(code, expected):
    assert map_channel(code) is expected
