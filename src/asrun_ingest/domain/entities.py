"""
Domain entities for asrun-ingest.

Programs make up the read-only catalog. Days group a program's broadcasts per
broadcast-calendar date. Broadcasts are the time-bounded on-air records; for a
fixed (day, channel, region) their intervals never overlap. LogFile rows record
which uploaded logs have been ingested.
"""

from __future__ import annotations

import uuid as uuid_module
from datetime import date as dt_date
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy import (
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from ..infra.db import Base, UTCDateTime
from ..shared.types import BroadcastStatus, Channel, Region


class Program(Base):
    """A catalog program, matched against log titles by keyword."""

    __tablename__ = "programs"

    id: Mapped[uuid_module.UUID] = mapped_column(Uuid, primary_key=True, default=uuid_module.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    keyword: Mapped[str] = mapped_column(String(255), nullable=False)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, server_default=func.now(), nullable=False)

    days: Mapped[list[Day]] = relationship("Day", back_populates="program", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Program(id={self.id}, name={self.name}, keyword={self.keyword}, year={self.year})>"


class Day(Base):
    """Broadcast-calendar grouping of one program on one date."""

    __tablename__ = "days"

    id: Mapped[uuid_module.UUID] = mapped_column(Uuid, primary_key=True, default=uuid_module.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[dt_date] = mapped_column(Date, nullable=False)
    program_id: Mapped[uuid_module.UUID] = mapped_column(
        Uuid, ForeignKey("programs.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, server_default=func.now(), nullable=False)

    program: Mapped[Program] = relationship("Program", back_populates="days")
    broadcasts: Mapped[list[Broadcast]] = relationship(
        "Broadcast", back_populates="day", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (UniqueConstraint("program_id", "date", name="uq_days_program_id_date"),)

    def __repr__(self) -> str:
        return f"<Day(id={self.id}, name={self.name}, date={self.date})>"


class Broadcast(Base):
    """One on-air interval of a program on a channel in a region."""

    __tablename__ = "broadcasts"

    id: Mapped[uuid_module.UUID] = mapped_column(Uuid, primary_key=True, default=uuid_module.uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    start_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    channel: Mapped[Channel] = mapped_column(SQLEnum(Channel, name="channel"), nullable=False)
    region: Mapped[Region] = mapped_column(SQLEnum(Region, name="region"), nullable=False)
    status: Mapped[BroadcastStatus] = mapped_column(
        SQLEnum(BroadcastStatus, name="broadcast_status"),
        nullable=False,
        default=BroadcastStatus.PENDING,
    )
    day_id: Mapped[uuid_module.UUID] = mapped_column(
        Uuid, ForeignKey("days.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, server_default=func.now(), nullable=False)

    day: Mapped[Day] = relationship("Day", back_populates="broadcasts")

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="end_after_start"),
        Index("ix_broadcasts_day_channel_region", "day_id", "channel", "region"),
    )

    def __repr__(self) -> str:
        return (
            f"<Broadcast(id={self.id}, name={self.name}, channel={self.channel}, "
            f"region={self.region}, start={self.start_time}, end={self.end_time})>"
        )


class LogFile(Base):
    """Reference to an ingested log object; one row per object key."""

    __tablename__ = "log_files"

    id: Mapped[uuid_module.UUID] = mapped_column(Uuid, primary_key=True, default=uuid_module.uuid4)
    s3_key: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    day_id: Mapped[uuid_module.UUID | None] = mapped_column(
        Uuid, ForeignKey("days.id", ondelete="SET NULL"), nullable=True
    )
    region: Mapped[Region] = mapped_column(SQLEnum(Region, name="region"), nullable=False)
    channel: Mapped[Channel] = mapped_column(SQLEnum(Channel, name="channel"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<LogFile(s3_key={self.s3_key}, day_id={self.day_id}, region={self.region})>"
