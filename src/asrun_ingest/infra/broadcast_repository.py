"""
Repository over the broadcast store.

All reads and writes of Programs, Days, Broadcasts and LogFile references go
through this class. Creates flush but never commit; the caller owns the
transaction. Unique-key conflicts on Day and LogFile creation are resolved by
rolling back the pending write and returning the row that won.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..domain.entities import Broadcast, Day, LogFile, Program
from ..shared.types import BroadcastStatus, Channel, Region
from .exceptions import PersistenceError

logger = structlog.get_logger(__name__)


def day_name(program_name: str, day_date: date) -> str:
    """``"<program> - 4 January 2026"``."""
    return f"{program_name} - {day_date.day} {day_date.strftime('%B')} {day_date.year}"


class BroadcastRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def list_programs(self) -> list[Program]:
        stmt = select(Program).order_by(Program.created_at, Program.name, Program.id)
        return list(self.db.scalars(stmt))

    def find_program_by_slug(self, slug: str) -> Program | None:
        return self.db.scalars(select(Program).where(Program.slug == slug)).first()

    # ------------------------------------------------------------------
    # Days
    # ------------------------------------------------------------------

    def find_day(self, program_id: uuid.UUID, day_date: date) -> Day | None:
        stmt = select(Day).where(Day.program_id == program_id, Day.date == day_date)
        return self.db.scalars(stmt).first()

    def create_day(self, program_id: uuid.UUID, day_date: date, name: str) -> Day:
        day = Day(name=name, date=day_date, program_id=program_id)
        self.db.add(day)
        self.db.flush()
        return day

    def get_or_create_day(
        self,
        program_id: uuid.UUID,
        program_name: str,
        day_date: date,
    ) -> tuple[Day, bool]:
        """Return the Day for ``(program_id, day_date)`` and whether it was created."""
        existing = self.find_day(program_id, day_date)
        if existing is not None:
            return existing, False
        try:
            return self.create_day(program_id, day_date, day_name(program_name, day_date)), True
        except IntegrityError:
            self.db.rollback()
            winner = self.find_day(program_id, day_date)
            if winner is None:
                raise PersistenceError(f"day for program {program_id} on {day_date} could not be created")
            logger.info("day_create_conflict", program_id=str(program_id), date=day_date.isoformat())
            return winner, False

    # ------------------------------------------------------------------
    # Broadcasts
    # ------------------------------------------------------------------

    def lock_day(self, day_id: uuid.UUID) -> None:
        """
        Hold the Day row until the current transaction ends.

        Broadcast writes for one day are serialized across processes: a second
        writer blocks here until the first commits, then sees its rows.
        """
        if self.db.get_bind().dialect.name == "postgresql":
            self.db.execute(select(Day.id).where(Day.id == day_id).with_for_update())
        else:
            # SQLite has no row locks; a no-op write takes the database write lock
            self.db.execute(
                update(Day)
                .where(Day.id == day_id)
                .values(name=Day.name)
                .execution_options(synchronize_session=False)
            )

    def find_overlapping_broadcast(
        self,
        day_id: uuid.UUID,
        channel: Channel,
        region: Region,
        start_time: datetime,
        end_time: datetime,
    ) -> Broadcast | None:
        """First broadcast of the day/channel/region whose ``[start, end)`` intersects the given interval."""
        stmt = (
            select(Broadcast)
            .where(
                Broadcast.day_id == day_id,
                Broadcast.channel == channel,
                Broadcast.region == region,
                Broadcast.start_time < end_time,
                Broadcast.end_time > start_time,
            )
            .order_by(Broadcast.start_time)
        )
        return self.db.scalars(stmt).first()

    def find_broadcast_covering(
        self,
        day_id: uuid.UUID,
        channel: Channel,
        region: Region,
        start_time: datetime,
        end_time: datetime,
    ) -> Broadcast | None:
        """First broadcast of the day/channel/region that contains the whole interval."""
        stmt = (
            select(Broadcast)
            .where(
                Broadcast.day_id == day_id,
                Broadcast.channel == channel,
                Broadcast.region == region,
                Broadcast.start_time <= start_time,
                Broadcast.end_time >= end_time,
            )
            .order_by(Broadcast.start_time)
        )
        return self.db.scalars(stmt).first()

    def get_broadcast(self, broadcast_id: uuid.UUID) -> Broadcast | None:
        return self.db.get(Broadcast, broadcast_id)

    def list_broadcasts(self, day_id: uuid.UUID) -> list[Broadcast]:
        stmt = select(Broadcast).where(Broadcast.day_id == day_id).order_by(Broadcast.start_time)
        return list(self.db.scalars(stmt))

    def create_broadcast(
        self,
        *,
        name: str,
        start_time: datetime,
        end_time: datetime,
        channel: Channel,
        region: Region,
        day_id: uuid.UUID,
        status: BroadcastStatus = BroadcastStatus.PENDING,
    ) -> Broadcast:
        broadcast = Broadcast(
            name=name,
            start_time=start_time,
            end_time=end_time,
            channel=channel,
            region=region,
            day_id=day_id,
            status=status,
        )
        self.db.add(broadcast)
        self.db.flush()
        return broadcast

    # ------------------------------------------------------------------
    # Log file references
    # ------------------------------------------------------------------

    def find_log_file_by_key(self, s3_key: str) -> LogFile | None:
        return self.db.scalars(select(LogFile).where(LogFile.s3_key == s3_key)).first()

    def create_log_file_reference(
        self,
        s3_key: str,
        day_id: uuid.UUID | None,
        region: Region,
        channel: Channel,
    ) -> LogFile:
        log_file = LogFile(s3_key=s3_key, day_id=day_id, region=region, channel=channel)
        self.db.add(log_file)
        self.db.flush()
        return log_file

    def record_log_file(
        self,
        s3_key: str,
        day_id: uuid.UUID | None,
        region: Region,
        channel: Channel,
    ) -> tuple[LogFile, bool]:
        """Create the reference for ``s3_key`` once; return it and whether it was created."""
        existing = self.find_log_file_by_key(s3_key)
        if existing is not None:
            return existing, False
        try:
            return self.create_log_file_reference(s3_key, day_id, region, channel), True
        except IntegrityError:
            self.db.rollback()
            winner = self.find_log_file_by_key(s3_key)
            if winner is None:
                raise PersistenceError(f"log file reference for {s3_key!r} could not be created")
            return winner, False
