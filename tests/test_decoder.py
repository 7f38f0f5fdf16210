"""Tests for FixedWidthLogDecoder.

Verifies:
- Columns are extracted from their fixed offsets and trimmed
- Entries are classified into billboards / programs / neither
- Short and blank lines are discarded but counted
- Malformed timestamps degrade the entry instead of dropping it
- Columns are byte offsets; multi-byte UTF-8 characters do not shift fields
- A line with a field that is not valid UTF-8 is skipped and counted
- Decoding is deterministic
"""

from __future__ import annotations

from datetime import datetime, time, timezone

import pytest

from asrun_ingest.asrun.decoder import FixedWidthLogDecoder, decode_log, parse_log_timestamp
from asrun_ingest.shared.types import BillboardKind, MaterialType
from tests.conftest import make_line, make_log


def test_columns_extracted(resolver):
    text = make_log(
        make_line("UNITED CUP DAY 4", "M", "20260104 06:00:00:02", market_channel="BRI9", material_key="ABC123")
    )
    parsed = FixedWidthLogDecoder(resolver).decode(text, "BNE")

    assert len(parsed.all_entries) == 1
    entry = parsed.all_entries[0]
    assert entry.line_number == 1
    assert entry.market_channel == "BRI9"
    assert entry.material_key == "ABC123"
    assert entry.material_code == "M"
    assert entry.material_type is MaterialType.PROGRAM_SEGMENT
    assert entry.database_title == "UNITED CUP DAY 4"
    assert entry.local_date_time == datetime(2026, 1, 4, 6, 0, 0)
    assert entry.date_time_utc == datetime(2026, 1, 3, 20, 0, 0, tzinfo=timezone.utc)
    assert entry.time == time(6, 0, 0)
    assert entry.is_billboard is False
    assert entry.raw_line.startswith("BRI9")


def test_classification():
    text = make_log(
        make_line("OB UNITED CUP SPONSOR", "I", "20260104 06:00:10:00"),
        make_line("MB UNITED CUP SPONSOR", "I", "20260104 06:20:00:00"),
        make_line("CB UNITED CUP SPONSOR", "I", "20260104 06:50:00:00"),
        make_line("PROMO NEWS TONIGHT", "I", "20260104 06:51:00:00"),
        make_line("UNITED CUP DAY 4", "M", "20260104 06:00:00:00"),
        make_line("UNITED CUP DAY 4 PT2", "S", "20260104 06:30:00:00"),
        make_line("OB LOOKS LIKE BILLBOARD", "X", "20260104 06:55:00:00"),
    )
    parsed = decode_log(text, "BNE")

    assert [e.billboard_kind for e in parsed.billboards] == [
        BillboardKind.OPEN,
        BillboardKind.MIDDLE,
        BillboardKind.CLOSE,
    ]
    assert [e.database_title for e in parsed.programs] == ["UNITED CUP DAY 4", "UNITED CUP DAY 4 PT2"]
    assert len(parsed.all_entries) == 7
    assert [e.line_number for e in parsed.all_entries] == list(range(1, 8))

    other = parsed.all_entries[6]
    assert other.material_type is MaterialType.OTHER
    assert other.billboard_kind is BillboardKind.NONE
    assert other not in parsed.programs and other not in parsed.billboards


def test_billboard_and_program_are_exclusive():
    parsed = decode_log(make_log(make_line("OB SPONSOR", "M")), "BNE")
    assert parsed.billboards == []
    assert len(parsed.programs) == 1


def test_short_and_blank_lines_discarded_but_counted():
    text = "\n".join(
        [
            "",
            "TOO SHORT",
            make_line("UNITED CUP DAY 4"),
            "   ",
            make_line("NEWS")[:359],
        ]
    )
    parsed = decode_log(text, "BNE")

    assert len(parsed.all_entries) == 1
    assert parsed.all_entries[0].line_number == 3
    assert parsed.stats.lines_scanned == 5
    assert parsed.stats.blank_lines == 2
    assert parsed.stats.short_lines == 2


def test_crlf_line_endings():
    text = make_line("UNITED CUP DAY 4") + "\r\n" + make_line("NEWS") + "\r\n"
    parsed = decode_log(text, "BNE")
    assert [e.database_title for e in parsed.programs] == ["UNITED CUP DAY 4", "NEWS"]


@pytest.mark.parametrize(
    "timestamp",
    ["", "20260104", "2026010406:00:00:00", "20260104 06:00", "20261304 06:00:00:00", "2026XX04 06:00:00:00"],
)
def test_malformed_timestamp_degrades_entry(timestamp):
    parsed = decode_log(make_log(make_line("UNITED CUP DAY 4", "M", timestamp)), "BNE")

    assert len(parsed.programs) == 1
    entry = parsed.programs[0]
    assert entry.local_date_time is None
    assert entry.date_time_utc is None
    assert entry.time is None
    assert parsed.stats.degraded_timestamps == 1


def test_long_line_title_is_truncated_to_column():
    line = make_line("X" * 64) + "TRAILING DATA BEYOND TITLE"
    parsed = decode_log(make_log(line), "BNE")
    assert parsed.programs[0].database_title == "X" * 64


def test_unknown_region_still_decodes():
    parsed = decode_log(make_log(make_line("NEWS", "M", "20260704 06:00:00:00")), "ZZZ")
    # default zone is Sydney (UTC+10 in July)
    assert parsed.programs[0].date_time_utc == datetime(2026, 7, 3, 20, 0, 0, tzinfo=timezone.utc)


def test_decoding_is_deterministic(resolver):
    text = make_log(
        make_line("UNITED CUP DAY 4", "M", "20260104 06:00:00:00"),
        make_line("OB SPONSOR", "I", "20260104 06:00:30:00"),
        make_line("NEWS", "M", "bad"),
    )
    decoder = FixedWidthLogDecoder(resolver)
    assert decoder.decode(text, "SYD") == decoder.decode(text, "SYD")


def test_parse_log_timestamp_ignores_frames():
    assert parse_log_timestamp("20260104 23:59:59:24") == datetime(2026, 1, 4, 23, 59, 59)
    assert parse_log_timestamp("20260104 24:00:00:00") is None


# ---------------------------------------------------------------------------
# Byte columns
# ---------------------------------------------------------------------------


def test_multibyte_character_does_not_shift_columns():
    raw = make_line("UNITED CUP DAY 4", "M", "20260104 06:00:00:00").encode("utf-8")
    # two filler bytes become one two-byte character; the line keeps its 360 bytes
    raw = raw[:10] + "é".encode("utf-8") + raw[12:]
    parsed = decode_log(raw + b"\n", "BNE")

    assert parsed.stats.short_lines == 0
    entry = parsed.programs[0]
    assert entry.database_title == "UNITED CUP DAY 4"
    assert entry.material_type is MaterialType.PROGRAM_SEGMENT
    assert entry.local_date_time == datetime(2026, 1, 4, 6, 0, 0)


def test_multibyte_title_decoded():
    text = make_log(make_line("CAFÉ DU MONDE"))
    parsed = decode_log(text, "BNE")
    assert parsed.programs[0].database_title == "CAFÉ DU MONDE"


def test_str_and_bytes_input_agree(resolver):
    text = make_log(make_line("UNITED CUP DAY 4"), make_line("OB SPONSOR", "I", "20260104 06:00:30:00"))
    decoder = FixedWidthLogDecoder(resolver)
    assert decoder.decode(text, "BNE") == decoder.decode(text.encode("utf-8"), "BNE")


def test_invalid_utf8_field_skips_line_and_continues():
    bad = make_line("UNITED CUP DAY 4").encode("utf-8")
    bad = bad[:300] + b"\xff" + bad[301:]
    good = make_line("NEWS", "M", "20260104 07:00:00:00").encode("utf-8")
    parsed = decode_log(bad + b"\n" + good + b"\n", "BNE")

    assert [e.database_title for e in parsed.programs] == ["NEWS"]
    assert parsed.programs[0].line_number == 2
    assert parsed.stats.failed_lines == 1
    assert parsed.stats.short_lines == 0
