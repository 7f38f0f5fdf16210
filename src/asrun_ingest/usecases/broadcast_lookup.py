"""
Broadcast lookup for clip requests and analysis launch.

A clip request names a program, channel, region and a UTC centre instant. The
Day is found on the fixed-offset day-anchor calendar and the Broadcast must
cover the whole clip window. Nothing is created here: a missing Day or
Broadcast is reported to the caller as a not-found condition.

Analysis is launched per broadcast; the only write is the status change to
PROCESSING.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

import structlog

from ..domain.interfaces import ClipExtractor, PipelineLauncher
from ..infra.broadcast_repository import BroadcastRepository
from ..infra.exceptions import (
    BroadcastNotFoundError,
    DayNotFoundError,
    ProgramNotFoundError,
    ValidationError,
)
from ..infra.settings import settings
from ..shared.types import BroadcastStatus, Channel, Region

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ClipWindow:
    broadcast_id: str
    day_id: str
    start: datetime
    end: datetime
    stream_url: str

    @property
    def duration_seconds(self) -> int:
        return int((self.end - self.start).total_seconds())


def day_date_for(instant: datetime, anchor_offset_hours: int | None = None) -> date:
    """Calendar date of ``instant`` on the fixed-offset day-anchor calendar."""
    if instant.tzinfo is None:
        raise ValidationError("datetime must be timezone-aware")
    hours = settings.day_anchor_utc_offset_hours if anchor_offset_hours is None else anchor_offset_hours
    return instant.astimezone(timezone(timedelta(hours=hours))).date()


def build_stream_url(channel: Channel, region: Region, start: datetime, end: datetime) -> str:
    return settings.stream_url_template.format(
        region=region.value.lower(),
        channel=channel.value.lower(),
        start=int(start.timestamp()),
        end=int(end.timestamp()),
    )


def locate_clip_window(
    repo: BroadcastRepository,
    *,
    program_slug: str,
    channel: Channel,
    region: Region,
    center_utc: datetime,
    seconds_before: int,
    seconds_after: int,
) -> ClipWindow:
    """Resolve the broadcast that covers ``[center - before, center + after]``.

    Raises:
        ValidationError: on negative offsets or a naive centre instant
        ProgramNotFoundError, DayNotFoundError, BroadcastNotFoundError
    """
    if seconds_before < 0 or seconds_after < 0:
        raise ValidationError("seconds_before and seconds_after must be non-negative")
    if seconds_before + seconds_after == 0:
        raise ValidationError("clip window must not be empty")

    program = repo.find_program_by_slug(program_slug)
    if program is None:
        raise ProgramNotFoundError(f"Program not found: {program_slug!r}")

    start = center_utc - timedelta(seconds=seconds_before)
    end = center_utc + timedelta(seconds=seconds_after)

    day_date = day_date_for(center_utc)
    day = repo.find_day(program.id, day_date)
    if day is None:
        raise DayNotFoundError(f"No day found for {program.name} on {day_date.isoformat()}")

    broadcast = repo.find_broadcast_covering(day.id, channel, region, start, end)
    if broadcast is None:
        raise BroadcastNotFoundError(
            f"No broadcast found for {channel.value}/{region.value} between "
            f"{start.isoformat()} and {end.isoformat()}"
        )

    logger.info(
        "clip_window_located",
        program=program.name,
        broadcast=broadcast.name,
        start=start.isoformat(),
        end=end.isoformat(),
    )
    return ClipWindow(
        broadcast_id=str(broadcast.id),
        day_id=str(day.id),
        start=start,
        end=end,
        stream_url=build_stream_url(channel, region, start, end),
    )


def request_clip(repo: BroadcastRepository, extractor: ClipExtractor, **request) -> tuple[ClipWindow, str]:
    """Locate the clip window and hand it to ``extractor``; returns the window and the clip's object key."""
    window = locate_clip_window(repo, **request)
    clip_key = extractor.extract_clip(window.stream_url, window.start, window.duration_seconds)
    return window, clip_key


def start_analysis(repo: BroadcastRepository, launcher: PipelineLauncher, broadcast_id: str) -> str:
    """Launch analysis of a pending or failed broadcast and mark it PROCESSING; returns the job id.

    The caller commits.
    """
    try:
        key = uuid.UUID(broadcast_id)
    except ValueError as exc:
        raise ValidationError(f"invalid broadcast id: {broadcast_id!r}") from exc

    broadcast = repo.get_broadcast(key)
    if broadcast is None:
        raise BroadcastNotFoundError(f"Broadcast not found: {broadcast_id}")
    if broadcast.status not in (BroadcastStatus.PENDING, BroadcastStatus.FAILED):
        raise ValidationError(f"broadcast {broadcast_id} is already {broadcast.status.value}")

    job_id = launcher.launch(str(broadcast.id))
    broadcast.status = BroadcastStatus.PROCESSING
    repo.db.flush()
    logger.info("analysis_started", broadcast=broadcast.name, job_id=job_id)
    return job_id
