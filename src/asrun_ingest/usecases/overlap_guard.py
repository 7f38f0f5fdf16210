"""Rejects candidate broadcasts that would overlap an existing one."""

from __future__ import annotations

import uuid
from datetime import datetime

import structlog

from ..domain.entities import Broadcast
from ..infra.broadcast_repository import BroadcastRepository
from ..shared.types import Channel, Region

logger = structlog.get_logger(__name__)


def intervals_overlap(
    start: datetime,
    end: datetime,
    other_start: datetime,
    other_end: datetime,
) -> bool:
    """Half-open interval test: ``[start, end)`` and ``[other_start, other_end)`` intersect."""
    return not (end <= other_start or start >= other_end)


class OverlapGuard:
    """
    Checks a candidate ``[start, end)`` against persisted broadcasts of the same
    day, channel and region.

    An overlap means the candidate is dropped: no create, no merge, no update.
    Abutting intervals (one ends exactly when the other starts) do not overlap.
    """

    def __init__(self, repository: BroadcastRepository) -> None:
        self.repository = repository

    def find_overlap(
        self,
        day_id: uuid.UUID,
        channel: Channel,
        region: Region,
        start_time: datetime,
        end_time: datetime,
    ) -> Broadcast | None:
        if end_time <= start_time:
            raise ValueError("end_time must be after start_time")
        return self.repository.find_overlapping_broadcast(day_id, channel, region, start_time, end_time)

    def has_overlap(
        self,
        day_id: uuid.UUID,
        channel: Channel,
        region: Region,
        start_time: datetime,
        end_time: datetime,
    ) -> bool:
        existing = self.find_overlap(day_id, channel, region, start_time, end_time)
        if existing is None:
            return False
        logger.info(
            "broadcast_overlap",
            day_id=str(day_id),
            channel=channel.value,
            region=region.value,
            start_time=start_time.isoformat(),
            end_time=end_time.isoformat(),
            existing=existing.name,
            existing_start=existing.start_time.isoformat(),
            existing_end=existing.end_time.isoformat(),
        )
        return True
