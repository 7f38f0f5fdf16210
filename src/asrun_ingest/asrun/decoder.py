"""
Fixed-width AS-RUN log decoder.

Column layout (0-indexed byte offsets, end-exclusive):

- ``[0, 6)``     market-channel
- ``[55, 75)``   local timestamp ``YYYYMMDD HH:MM:SS:FF`` (frames ignored)
- ``[119, 151)`` material key
- ``[188]``      material type (``I`` interstitial, ``M``/``S`` program segment)
- ``[295, 359)`` database title

Columns count bytes, not characters: each field is sliced from the raw line
and decoded as UTF-8 on its own, so a multi-byte character in one field never
shifts the others. Lines shorter than ``MIN_LINE_LENGTH`` bytes cannot contain
the title field and are discarded. A line whose timestamp cannot be parsed is
kept with ``None`` timestamps. A line with a field that is not valid UTF-8 is
skipped with a warning; decoding always continues with the next line.
"""

from __future__ import annotations

from datetime import datetime

import structlog

from ..infra.exceptions import LogDecodeError
from ..shared.types import BillboardKind, MaterialType
from .log_types import LogEntry, ParsedLogData
from .timezones import TimeZoneResolver

logger = structlog.get_logger(__name__)

MARKET_CHANNEL = slice(0, 6)
TIMESTAMP = slice(55, 75)
MATERIAL_KEY = slice(119, 151)
MATERIAL_TYPE = slice(188, 189)
DATABASE_TITLE = slice(295, 359)

MIN_LINE_LENGTH = 360


def _field(line: bytes, columns: slice, name: str, line_number: int) -> str:
    try:
        return line[columns].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise LogDecodeError(line_number, f"{name} is not valid UTF-8 at byte {columns.start + exc.start}") from exc


class FixedWidthLogDecoder:
    """Decodes AS-RUN log content into typed entries."""

    def __init__(self, resolver: TimeZoneResolver | None = None) -> None:
        self.resolver = resolver or TimeZoneResolver()

    def decode(self, content: bytes | str, region: str) -> ParsedLogData:
        """Decode ``content`` for ``region``; output lists preserve line order."""
        if isinstance(content, str):
            content = content.encode("utf-8")
        result = ParsedLogData()
        stats = result.stats

        for index, line in enumerate(content.split(b"\n")):
            line_number = index + 1
            stats.lines_scanned += 1
            line = line.rstrip(b"\r")

            if not line.strip():
                stats.blank_lines += 1
                continue
            if len(line) < MIN_LINE_LENGTH:
                stats.short_lines += 1
                logger.debug("short_line_discarded", line_number=line_number, length=len(line))
                continue

            try:
                entry = self._decode_line(line, line_number, region)
            except LogDecodeError as exc:
                stats.failed_lines += 1
                logger.warning("line_decode_failed", line_number=line_number, error=str(exc))
                continue

            if entry.local_date_time is None:
                stats.degraded_timestamps += 1

            result.all_entries.append(entry)
            if entry.is_billboard:
                result.billboards.append(entry)
            elif entry.is_program:
                result.programs.append(entry)

        logger.info(
            "log_decoded",
            region=region,
            total_entries=len(result.all_entries),
            billboards=len(result.billboards),
            programs=len(result.programs),
            lines_scanned=stats.lines_scanned,
            lines_discarded=stats.blank_lines + stats.short_lines + stats.failed_lines,
            degraded_timestamps=stats.degraded_timestamps,
        )
        return result

    def _decode_line(self, line: bytes, line_number: int, region: str) -> LogEntry:
        market_channel = _field(line, MARKET_CHANNEL, "market-channel", line_number).strip()
        timestamp_raw = _field(line, TIMESTAMP, "timestamp", line_number).strip()
        material_key = _field(line, MATERIAL_KEY, "material key", line_number).strip()
        material_code = _field(line, MATERIAL_TYPE, "material type", line_number)
        database_title = _field(line, DATABASE_TITLE, "database title", line_number).strip()

        local_dt = parse_log_timestamp(timestamp_raw)
        utc_dt = None
        if local_dt is not None:
            try:
                utc_dt = self.resolver.to_utc(local_dt, region)
            except (OverflowError, ValueError) as exc:
                logger.warning("utc_conversion_failed", line_number=line_number, error=str(exc))
                local_dt = None

        material_type = MaterialType.from_code(material_code)
        return LogEntry(
            line_number=line_number,
            market_channel=market_channel,
            local_date_time=local_dt,
            date_time_utc=utc_dt,
            time=local_dt.time() if local_dt is not None else None,
            material_key=material_key,
            material_code=material_code,
            material_type=material_type,
            database_title=database_title,
            billboard_kind=BillboardKind.classify(material_type, database_title),
            raw_line=line.decode("utf-8", errors="replace").strip(),
        )


def parse_log_timestamp(raw: str) -> datetime | None:
    """Parse ``YYYYMMDD HH:MM:SS:FF`` into a naive local datetime; ``None`` if malformed."""
    if not raw or len(raw) < 17:
        return None
    parts = raw.split()
    if len(parts) < 2:
        return None
    date_part, time_part = parts[0], parts[1]
    if len(date_part) < 8:
        return None
    clock = time_part.split(":")
    if len(clock) < 3:
        return None
    try:
        return datetime(
            int(date_part[0:4]),
            int(date_part[4:6]),
            int(date_part[6:8]),
            int(clock[0]),
            int(clock[1]),
            int(clock[2]),
        )
    except ValueError:
        return None


def decode_log(content: bytes | str, region: str, resolver: TimeZoneResolver | None = None) -> ParsedLogData:
    """Decode a whole log file with a fresh decoder."""
    return FixedWidthLogDecoder(resolver).decode(content, region)
