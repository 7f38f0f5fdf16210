"""
Create programs, days, broadcasts and log_files tables.

Revision ID: 20260105_000100_broadcasts
Revises:
Create Date: 2026-01-05 00:01:00.000000
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20260105_000100_broadcasts"
down_revision: str | None = None
branch_labels: str | None = None
depends_on: str | None = None

REGIONS = ("SYD", "MEL", "BNE", "PER", "ADL")
CHANNELS = ("CH9", "GO", "GEM")
STATUSES = ("PENDING", "PROCESSING", "COMPLETED", "FAILED")


def upgrade() -> None:
    region = sa.Enum(*REGIONS, name="region")
    channel = sa.Enum(*CHANNELS, name="channel")
    status = sa.Enum(*STATUSES, name="broadcast_status")

    op.create_table(
        "programs",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=True),
        sa.Column("keyword", sa.String(length=255), nullable=False),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("slug", name="uq_programs_slug"),
    )

    op.create_table(
        "days",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column(
            "program_id",
            sa.Uuid(),
            sa.ForeignKey("programs.id", ondelete="CASCADE", name="fk_days_program_id_programs"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("program_id", "date", name="uq_days_program_id_date"),
    )

    op.create_table(
        "broadcasts",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("channel", channel, nullable=False),
        sa.Column("region", region, nullable=False),
        sa.Column("status", status, nullable=False),
        sa.Column(
            "day_id",
            sa.Uuid(),
            sa.ForeignKey("days.id", ondelete="CASCADE", name="fk_broadcasts_day_id_days"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("end_time > start_time", name="ck_broadcasts_end_after_start"),
    )
    op.create_index("ix_broadcasts_day_channel_region", "broadcasts", ["day_id", "channel", "region"])

    op.create_table(
        "log_files",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("s3_key", sa.Text(), nullable=False),
        sa.Column(
            "day_id",
            sa.Uuid(),
            sa.ForeignKey("days.id", ondelete="SET NULL", name="fk_log_files_day_id_days"),
            nullable=True,
        ),
        sa.Column("region", postgresql.ENUM(*REGIONS, name="region", create_type=False), nullable=False),
        sa.Column("channel", postgresql.ENUM(*CHANNELS, name="channel", create_type=False), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("s3_key", name="uq_log_files_s3_key"),
    )


def downgrade() -> None:
    op.drop_table("log_files")
    op.drop_index("ix_broadcasts_day_channel_region", table_name="broadcasts")
    op.drop_table("broadcasts")
    op.drop_table("days")
    op.drop_table("programs")

    bind = op.get_bind()
    for name in ("broadcast_status", "channel", "region"):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
