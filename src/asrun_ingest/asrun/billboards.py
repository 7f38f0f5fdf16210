"""
Billboard association.

For each on-air instance of a program, the window runs from the program
entry's local time-of-day to the time-of-day of the next program entry (any
title) in line order. Billboards whose time-of-day falls inside any window are
associated with the program.

Windows crossing local midnight (the next program's time-of-day is earlier
than the program's) wrap: they cover ``[start, 24:00)`` plus ``[00:00, next)``,
and the post-midnight part only admits billboards logged after the program
entry.
"""

from __future__ import annotations

from dataclasses import dataclass

from .log_types import LogEntry, ParsedLogData
from .matcher import ProgramMatcher
from .program_index import ProgramIndex

SECONDS_PER_DAY = 24 * 3600


@dataclass(frozen=True)
class AiringWindow:
    """Local time-of-day window of one program instance."""

    program_entry: LogEntry
    start_seconds: int
    end_seconds: int | None  # None: open-ended (no later program in the log)

    @property
    def wraps_midnight(self) -> bool:
        return self.end_seconds is not None and self.end_seconds < self.start_seconds

    def contains(self, billboard: LogEntry) -> bool:
        seconds = billboard.seconds_since_midnight
        if seconds is None:
            return False
        if self.end_seconds is None:
            return seconds >= self.start_seconds
        if not self.wraps_midnight:
            return self.start_seconds <= seconds < self.end_seconds
        if seconds >= self.start_seconds:
            return True
        return seconds < self.end_seconds and billboard.line_number > self.program_entry.line_number


class BillboardAssociator:
    """Finds the billboards that aired during a program's on-air windows."""

    def __init__(self, parsed: ParsedLogData, index: ProgramIndex | None = None) -> None:
        self.parsed = parsed
        self.index = index or ProgramIndex.from_parsed(parsed)

    def windows(self, program_keyword: str) -> list[AiringWindow]:
        matcher = ProgramMatcher(program_keyword)
        windows: list[AiringWindow] = []
        for program in matcher.match(self.parsed.programs):
            start = program.seconds_since_midnight
            if start is None:
                continue
            following = self.index.next_timed_program(program.line_number)
            end = following.seconds_since_midnight if following is not None else None
            windows.append(AiringWindow(program_entry=program, start_seconds=start, end_seconds=end))
        return windows

    def associate(self, program_keyword: str) -> list[LogEntry]:
        """Billboards inside any window of the program; first-seen order, de-duplicated by identity."""
        found: list[LogEntry] = []
        seen: set[int] = set()
        for window in self.windows(program_keyword):
            for billboard in self.parsed.billboards:
                if id(billboard) in seen:
                    continue
                if window.contains(billboard):
                    seen.add(id(billboard))
                    found.append(billboard)
        return found


def billboards_for_program(parsed: ParsedLogData, program_keyword: str) -> list[LogEntry]:
    return BillboardAssociator(parsed).associate(program_keyword)
