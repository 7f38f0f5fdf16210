"""Next-program lookups over one file's program entries.

Built once per decoded file with a single linear pass, so segment end-time
resolution and billboard windowing do not rescan the whole entry list for
every program instance.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Callable

from .log_types import LogEntry, ParsedLogData


class ProgramIndex:
    def __init__(self, programs: list[LogEntry]) -> None:
        self._programs = programs
        self._lines = [entry.line_number for entry in programs]
        n = len(programs)
        # _next_timed[i] / _next_dated[i]: first position >= i with a usable time / UTC instant
        self._next_timed = [n] * (n + 1)
        self._next_dated = [n] * (n + 1)
        for i in range(n - 1, -1, -1):
            entry = programs[i]
            self._next_timed[i] = i if entry.time is not None else self._next_timed[i + 1]
            self._next_dated[i] = i if entry.date_time_utc is not None else self._next_dated[i + 1]

    @classmethod
    def from_parsed(cls, parsed: ParsedLogData) -> ProgramIndex:
        return cls(parsed.programs)

    def __len__(self) -> int:
        return len(self._programs)

    def _position_after(self, line_number: int) -> int:
        return bisect_right(self._lines, line_number)

    def next_timed_program(self, after_line: int) -> LogEntry | None:
        """First program entry after ``after_line`` (any title) that has a local time."""
        pos = self._next_timed[self._position_after(after_line)]
        return self._programs[pos] if pos < len(self._programs) else None

    def next_dated_program(
        self,
        after_line: int,
        exclude: Callable[[LogEntry], bool] | None = None,
    ) -> LogEntry | None:
        """First program entry after ``after_line`` with a UTC instant, skipping ``exclude`` matches."""
        n = len(self._programs)
        pos = self._next_dated[self._position_after(after_line)]
        while pos < n:
            entry = self._programs[pos]
            if exclude is None or not exclude(entry):
                return entry
            pos = self._next_dated[pos + 1]
        return None
