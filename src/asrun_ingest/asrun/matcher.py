"""Keyword matching of program entries against the catalog."""

from __future__ import annotations

from collections.abc import Iterable

from .log_types import LogEntry


class ProgramMatcher:
    """Case-insensitive substring match of a catalog keyword within ``database_title``.

    No tokenization and no fuzzy matching; keywords are curated to be
    unambiguous.
    """

    def __init__(self, keyword: str) -> None:
        if not keyword or not keyword.strip():
            raise ValueError("keyword is required")
        self.keyword = keyword
        self._needle = keyword.upper()

    def matches(self, entry: LogEntry) -> bool:
        return self._needle in entry.database_title.upper()

    def match(self, programs: Iterable[LogEntry]) -> list[LogEntry]:
        """Return the entries whose title contains the keyword, in input order."""
        return [entry for entry in programs if self.matches(entry)]


def match_programs(programs: Iterable[LogEntry], keyword: str) -> list[LogEntry]:
    return ProgramMatcher(keyword).match(programs)
