"""
AS-RUN log types.

No persistence or DB dependencies. Entries are immutable once decoded; a
ParsedLogData belongs to exactly one decode call and is discarded after the
file is processed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time

from ..shared.types import BillboardKind, MaterialType


@dataclass(frozen=True)
class LogEntry:
    """One decoded physical line of an AS-RUN log.

    ``line_number`` is the 1-based position in the source file and the only
    ordering key; timestamps are not trusted for ordering because malformed
    lines carry ``None`` for ``local_date_time``/``date_time_utc``/``time``.
    """

    line_number: int
    market_channel: str
    local_date_time: datetime | None
    date_time_utc: datetime | None
    time: time | None
    material_key: str
    material_code: str
    material_type: MaterialType
    database_title: str
    billboard_kind: BillboardKind
    raw_line: str

    @property
    def is_billboard(self) -> bool:
        return self.billboard_kind is not BillboardKind.NONE

    @property
    def is_program(self) -> bool:
        return self.material_type is MaterialType.PROGRAM_SEGMENT

    @property
    def seconds_since_midnight(self) -> int | None:
        if self.time is None:
            return None
        return self.time.hour * 3600 + self.time.minute * 60 + self.time.second

    def to_dict(self) -> dict[str, object]:
        return {
            "line_number": self.line_number,
            "market_channel": self.market_channel,
            "local_date_time": self.local_date_time.isoformat() if self.local_date_time else None,
            "date_time_utc": self.date_time_utc.isoformat() if self.date_time_utc else None,
            "time": self.time.isoformat() if self.time else None,
            "material_key": self.material_key,
            "material_type": self.material_code,
            "database_title": self.database_title,
            "is_billboard": self.is_billboard,
            "billboard_type": None if not self.is_billboard else self.billboard_kind.value,
        }


@dataclass
class DecodeStats:
    """Line accounting for one decode call."""

    lines_scanned: int = 0
    blank_lines: int = 0
    short_lines: int = 0
    failed_lines: int = 0
    degraded_timestamps: int = 0


@dataclass
class ParsedLogData:
    """The three projections of one file's entries, all in line order."""

    billboards: list[LogEntry] = field(default_factory=list)
    programs: list[LogEntry] = field(default_factory=list)
    all_entries: list[LogEntry] = field(default_factory=list)
    stats: DecodeStats = field(default_factory=DecodeStats)


@dataclass
class BroadcastSegment:
    """A contiguous run of matched entries attributed to one program instance."""

    start_entry: LogEntry
    end_entry: LogEntry
    entries: list[LogEntry]


@dataclass(frozen=True)
class BroadcastWindow:
    """Resolved UTC interval for a segment, ready for overlap check and persistence."""

    segment: BroadcastSegment
    start_time: datetime
    end_time: datetime
    end_resolved_from: LogEntry | None

    @property
    def used_default_duration(self) -> bool:
        return self.end_resolved_from is None
