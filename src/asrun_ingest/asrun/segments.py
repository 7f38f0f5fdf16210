"""
Broadcast segmentation.

Groups one program's matched entries into contiguous segments, tolerating
gaps up to ``max_gap_minutes`` (commercial breaks), and resolves each
segment's UTC window from the surrounding entry stream.
"""

from __future__ import annotations

from datetime import timedelta

import structlog

from .log_types import BroadcastSegment, BroadcastWindow, LogEntry
from .matcher import ProgramMatcher
from .program_index import ProgramIndex

logger = structlog.get_logger(__name__)

DEFAULT_MAX_GAP_MINUTES = 30
DEFAULT_BROADCAST_DURATION = timedelta(hours=2)


class SegmentBuilder:
    """Builds broadcast segments and windows for one program's matches."""

    def __init__(
        self,
        max_gap_minutes: int = DEFAULT_MAX_GAP_MINUTES,
        default_duration: timedelta = DEFAULT_BROADCAST_DURATION,
    ) -> None:
        if max_gap_minutes < 0:
            raise ValueError("max_gap_minutes must be non-negative")
        if default_duration <= timedelta(0):
            raise ValueError("default_duration must be positive")
        self.max_gap = timedelta(minutes=max_gap_minutes)
        self.default_duration = default_duration

    def build_segments(self, matching_entries: list[LogEntry]) -> list[BroadcastSegment]:
        """Split ``matching_entries`` (line order) wherever the gap to the next entry exceeds the limit.

        A pair with an unknown timestamp on either side never splits. Every
        input entry lands in exactly one segment.
        """
        segments: list[BroadcastSegment] = []
        start = 0
        for i, current in enumerate(matching_entries):
            if i + 1 == len(matching_entries):
                segments.append(self._segment(matching_entries[start : i + 1]))
                break
            following = matching_entries[i + 1]
            if current.date_time_utc is None or following.date_time_utc is None:
                continue
            if following.date_time_utc - current.date_time_utc > self.max_gap:
                segments.append(self._segment(matching_entries[start : i + 1]))
                start = i + 1
        return segments

    @staticmethod
    def _segment(entries: list[LogEntry]) -> BroadcastSegment:
        return BroadcastSegment(start_entry=entries[0], end_entry=entries[-1], entries=entries)

    def resolve_window(
        self,
        segment: BroadcastSegment,
        matcher: ProgramMatcher,
        index: ProgramIndex,
    ) -> BroadcastWindow | None:
        """UTC window for ``segment``, or ``None`` when its start has no usable timestamp.

        The end is the start of the next program entry after the segment whose
        title does not match the program; without one the window falls back to
        ``default_duration``.
        """
        start_entry = segment.start_entry
        if start_entry.time is None or start_entry.date_time_utc is None:
            logger.warning(
                "segment_skipped_invalid_start",
                keyword=matcher.keyword,
                line_number=start_entry.line_number,
            )
            return None

        start_time = start_entry.date_time_utc
        next_different = index.next_dated_program(segment.end_entry.line_number, exclude=matcher.matches)
        if next_different is not None and next_different.date_time_utc is not None:
            end_time = next_different.date_time_utc
        else:
            end_time = start_time + self.default_duration
            next_different = None

        if end_time <= start_time:
            logger.warning(
                "segment_end_not_after_start",
                keyword=matcher.keyword,
                start_line=start_entry.line_number,
                end_line=next_different.line_number if next_different else None,
            )
            end_time = start_time + self.default_duration
            next_different = None

        return BroadcastWindow(
            segment=segment,
            start_time=start_time,
            end_time=end_time,
            end_resolved_from=next_different,
        )

    def plan(
        self,
        matching_entries: list[LogEntry],
        matcher: ProgramMatcher,
        index: ProgramIndex,
    ) -> list[BroadcastWindow]:
        """Segments for ``matching_entries`` resolved to windows; invalid starts are dropped."""
        windows: list[BroadcastWindow] = []
        for segment in self.build_segments(matching_entries):
            window = self.resolve_window(segment, matcher, index)
            if window is not None:
                windows.append(window)
        return windows
