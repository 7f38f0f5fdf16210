"""
Ingest orchestrator for uploaded AS-RUN log files.

For each file: parse the filename, fetch the object, decode it, then for every
catalog program match entries, build segments, and create the Day and the
non-overlapping Broadcasts. Finally record the LogFile reference.

Every write is keyed (Day on program+date, Broadcast via the overlap guard,
LogFile on object key) and committed on its own, so re-running a file is a
no-op and an interrupted file can simply be run again.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any

import structlog
from sqlalchemy.orm import Session

from ..asrun.decoder import FixedWidthLogDecoder
from ..asrun.filenames import LogFileMetadata, parse_log_filename
from ..asrun.log_types import BroadcastWindow, ParsedLogData
from ..asrun.matcher import ProgramMatcher
from ..asrun.program_index import ProgramIndex
from ..asrun.segments import SegmentBuilder
from ..asrun.timezones import TimeZoneResolver
from ..domain.interfaces import ObjectStore
from ..infra.broadcast_repository import BroadcastRepository
from ..infra.exceptions import FilenameError
from ..infra.key_locks import KeyedLocks
from ..infra.settings import settings
from ..infra.uow import SessionFactory, session
from .overlap_guard import OverlapGuard

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LogFileRef:
    """One uploaded log object."""

    bucket: str
    key: str


@dataclass(frozen=True)
class CatalogProgram:
    """Detached snapshot of a catalog program, safe to share across worker threads."""

    id: uuid.UUID
    name: str
    keyword: str
    year: int | None = None


@dataclass
class CreatedBroadcast:
    program: str
    broadcast_id: str
    name: str
    start_time: datetime
    end_time: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "program": self.program,
            "broadcast": self.broadcast_id,
            "name": self.name,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
        }


@dataclass
class FileResult:
    """Outcome of ingesting one file."""

    key: str
    broadcasts: list[CreatedBroadcast] = field(default_factory=list)
    programs_matched: list[str] = field(default_factory=list)
    days_created: int = 0
    segments_overlapping: int = 0
    segments_invalid_start: int = 0
    log_file_recorded: bool = False
    skipped_reason: str | None = None
    error: str | None = None

    @property
    def processed(self) -> bool:
        return self.skipped_reason is None and self.error is None


@dataclass
class IngestionSummary:
    files: list[FileResult] = field(default_factory=list)

    @property
    def broadcasts_created(self) -> int:
        return sum(len(f.broadcasts) for f in self.files)

    @property
    def programs_matched(self) -> int:
        return sum(len(f.programs_matched) for f in self.files)

    @property
    def skipped(self) -> list[FileResult]:
        return [f for f in self.files if f.skipped_reason is not None]

    @property
    def failed(self) -> list[FileResult]:
        return [f for f in self.files if f.error is not None]

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "message": f"Processed {len(self.files)} file(s)",
            "broadcasts_created": self.broadcasts_created,
            "programs_matched": self.programs_matched,
            "results": [b.to_dict() for f in self.files for b in f.broadcasts],
            "skipped": [{"key": f.key, "reason": f.skipped_reason} for f in self.skipped],
            "failed": [{"key": f.key, "error": f.error} for f in self.failed],
        }


class IngestionOrchestrator:
    def __init__(
        self,
        object_store: ObjectStore,
        session_factory: SessionFactory | None = None,
        *,
        resolver: TimeZoneResolver | None = None,
        segment_builder: SegmentBuilder | None = None,
        locks: KeyedLocks | None = None,
        skip_processed_files: bool | None = None,
        max_workers: int | None = None,
    ) -> None:
        self.object_store = object_store
        self.session_factory = session_factory
        self.decoder = FixedWidthLogDecoder(resolver or TimeZoneResolver(default_region=settings.default_region))
        self.segment_builder = segment_builder or SegmentBuilder(
            max_gap_minutes=settings.max_gap_minutes,
            default_duration=timedelta(hours=settings.default_broadcast_hours),
        )
        self.locks = locks or KeyedLocks()
        self.skip_processed_files = (
            settings.skip_processed_files if skip_processed_files is None else skip_processed_files
        )
        self.max_workers = max(1, settings.max_workers if max_workers is None else max_workers)

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def load_catalog(self) -> list[CatalogProgram]:
        with session(self.session_factory) as db:
            programs = BroadcastRepository(db).list_programs()
            catalog = [CatalogProgram(p.id, p.name, p.keyword, p.year) for p in programs]
        logger.info("catalog_loaded", programs=len(catalog))
        return catalog

    def ingest_batch(
        self,
        files: Sequence[LogFileRef],
        catalog: Sequence[CatalogProgram] | None = None,
    ) -> IngestionSummary:
        """Ingest ``files``; per-file problems are recorded in the summary, not raised."""
        if catalog is None:
            catalog = self.load_catalog()

        if self.max_workers == 1 or len(files) <= 1:
            results = [self.ingest_file(ref, catalog) for ref in files]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                results = list(pool.map(lambda ref: self.ingest_file(ref, catalog), files))

        summary = IngestionSummary(files=results)
        logger.info(
            "ingestion_complete",
            files=len(results),
            broadcasts_created=summary.broadcasts_created,
            programs_matched=summary.programs_matched,
            skipped=len(summary.skipped),
            failed=len(summary.failed),
        )
        return summary

    # ------------------------------------------------------------------
    # File
    # ------------------------------------------------------------------

    def ingest_file(self, ref: LogFileRef, catalog: Sequence[CatalogProgram]) -> FileResult:
        result = FileResult(key=ref.key)
        log = logger.bind(key=ref.key)

        try:
            metadata = parse_log_filename(ref.key)
        except FilenameError as exc:
            log.warning("file_skipped", reason=str(exc))
            result.skipped_reason = str(exc)
            return result

        log = log.bind(
            date=metadata.broadcast_date.isoformat(),
            region=metadata.region.value,
            channel=metadata.channel.value,
        )
        try:
            with session(self.session_factory) as db:
                self._ingest(db, ref, metadata, catalog, result, log)
        except Exception as exc:
            log.exception("file_failed", error=str(exc))
            result.error = f"{type(exc).__name__}: {exc}"
        return result

    def _ingest(
        self,
        db: Session,
        ref: LogFileRef,
        metadata: LogFileMetadata,
        catalog: Sequence[CatalogProgram],
        result: FileResult,
        log: Any,
    ) -> None:
        repo = BroadcastRepository(db)

        if self.skip_processed_files and repo.find_log_file_by_key(ref.key) is not None:
            log.info("file_skipped", reason="already processed")
            result.skipped_reason = "already processed"
            return

        content = self.object_store.get_object(ref.bucket, ref.key)
        parsed = self.decoder.decode(content, metadata.region.value)
        index = ProgramIndex.from_parsed(parsed)

        day_ids: list[uuid.UUID] = []
        for program in catalog:
            day_id = self._ingest_program(db, repo, program, parsed, index, metadata, result, log)
            if day_id is not None and day_id not in day_ids:
                day_ids.append(day_id)

        self._warn_shared_matches(parsed, catalog, log)

        with self.locks.hold(("log_file", ref.key)):
            _, created = repo.record_log_file(
                ref.key,
                day_ids[0] if day_ids else None,
                metadata.region,
                metadata.channel,
            )
            db.commit()
        result.log_file_recorded = created
        log.info("log_file_reference", created=created, day_id=str(day_ids[0]) if day_ids else None)

    def _ingest_program(
        self,
        db: Session,
        repo: BroadcastRepository,
        program: CatalogProgram,
        parsed: ParsedLogData,
        index: ProgramIndex,
        metadata: LogFileMetadata,
        result: FileResult,
        log: Any,
    ) -> uuid.UUID | None:
        if not program.keyword or not program.keyword.strip():
            log.warning("program_without_keyword", program=program.name)
            return None

        matcher = ProgramMatcher(program.keyword)
        matching = matcher.match(parsed.programs)
        if not matching:
            log.debug("no_program_match", program=program.name, keyword=program.keyword)
            return None

        segments = self.segment_builder.build_segments(matching)
        windows = [
            w for w in (self.segment_builder.resolve_window(s, matcher, index) for s in segments) if w is not None
        ]
        result.programs_matched.append(program.name)
        result.segments_invalid_start += len(segments) - len(windows)
        log.info(
            "program_matched",
            program=program.name,
            entries=len(matching),
            segments=len(segments),
        )

        day_id = self._ensure_day(db, repo, program, metadata.broadcast_date, result, log)
        guard = OverlapGuard(repo)
        for window in windows:
            created = self._create_broadcast(db, repo, guard, program, day_id, window, metadata, log)
            if created is None:
                result.segments_overlapping += 1
            else:
                result.broadcasts.append(created)
        return day_id

    def _ensure_day(
        self,
        db: Session,
        repo: BroadcastRepository,
        program: CatalogProgram,
        day_date: date,
        result: FileResult,
        log: Any,
    ) -> uuid.UUID:
        with self.locks.hold(("day", program.id, day_date)):
            day, created = repo.get_or_create_day(program.id, program.name, day_date)
            db.commit()
        if created:
            result.days_created += 1
        log.info("day_ready", day=day.name, created=created)
        return day.id

    def _create_broadcast(
        self,
        db: Session,
        repo: BroadcastRepository,
        guard: OverlapGuard,
        program: CatalogProgram,
        day_id: uuid.UUID,
        window: BroadcastWindow,
        metadata: LogFileMetadata,
        log: Any,
    ) -> CreatedBroadcast | None:
        # The in-process lock orders threads; lock_day orders writers in other processes.
        with self.locks.hold(("broadcast", day_id, metadata.channel, metadata.region)):
            repo.lock_day(day_id)
            broadcast = None
            if not guard.has_overlap(day_id, metadata.channel, metadata.region, window.start_time, window.end_time):
                broadcast = repo.create_broadcast(
                    name=f"{window.segment.start_entry.database_title} ({metadata.region.value})",
                    start_time=window.start_time,
                    end_time=window.end_time,
                    channel=metadata.channel,
                    region=metadata.region,
                    day_id=day_id,
                )
            db.commit()
        if broadcast is None:
            return None

        log.info(
            "broadcast_created",
            broadcast=broadcast.name,
            start_time=window.start_time.isoformat(),
            end_time=window.end_time.isoformat(),
            default_duration=window.used_default_duration,
        )
        return CreatedBroadcast(
            program=program.name,
            broadcast_id=str(broadcast.id),
            name=broadcast.name,
            start_time=window.start_time,
            end_time=window.end_time,
        )

    @staticmethod
    def _warn_shared_matches(parsed: ParsedLogData, catalog: Sequence[CatalogProgram], log: Any) -> None:
        # Catalog order decides attribution; titles claimed by several keywords are only reported.
        matchers = [(p.name, ProgramMatcher(p.keyword)) for p in catalog if p.keyword and p.keyword.strip()]
        for entry in parsed.programs:
            names = [name for name, matcher in matchers if matcher.matches(entry)]
            if len(names) > 1:
                log.warning(
                    "entry_matches_multiple_programs",
                    line_number=entry.line_number,
                    title=entry.database_title,
                    programs=names,
                )
