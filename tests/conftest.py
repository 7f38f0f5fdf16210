"""
Global test configuration for asrun-ingest.

Provides an in-memory SQLite broadcast store per test (or a file-backed one
for multi-threaded writers), an in-memory object store, and a builder for
fixed-width AS-RUN lines.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from asrun_ingest.asrun.timezones import TimeZoneResolver
from asrun_ingest.domain.entities import Program
from asrun_ingest.domain.interfaces import ObjectStore
from asrun_ingest.infra.db import Base
from asrun_ingest.infra.exceptions import ObjectStoreError


def make_line(
    title: str,
    material_type: str = "M",
    timestamp: str = "20260104 06:00:00:00",
    market_channel: str = "BRI9",
    material_key: str = "MK0001",
) -> str:
    """Build one fixed-width AS-RUN line (360 columns)."""
    buf = [" "] * 360

    def put(start: int, text: str, width: int) -> None:
        for offset, ch in enumerate(text[:width]):
            buf[start + offset] = ch

    put(0, market_channel, 6)
    put(55, timestamp, 20)
    put(119, material_key, 32)
    put(188, material_type, 1)
    put(295, title, 64)
    return "".join(buf)


def make_log(*lines: str) -> str:
    return "\n".join(lines) + "\n"


@pytest.fixture
def line():
    return make_line


@pytest.fixture
def resolver() -> TimeZoneResolver:
    return TimeZoneResolver()


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True, expire_on_commit=False)


@pytest.fixture
def file_session_factory(tmp_path) -> Iterator[sessionmaker]:
    """Sessions over a SQLite file, one connection per session, for tests that write from several threads."""
    eng = create_engine(
        f"sqlite:///{tmp_path / 'broadcasts.db'}",
        connect_args={"check_same_thread": False, "timeout": 15},
        future=True,
    )
    Base.metadata.create_all(eng)
    try:
        yield sessionmaker(bind=eng, autoflush=False, autocommit=False, future=True, expire_on_commit=False)
    finally:
        eng.dispose()


@pytest.fixture
def db(session_factory) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def add_program(session_factory):
    """Insert a catalog program and return it (detached, attributes loaded)."""

    def _add(name: str, keyword: str, slug: str | None = None, year: int | None = None, created_at=None) -> Program:
        with session_factory() as s:
            program = Program(name=name, keyword=keyword, slug=slug, year=year)
            if created_at is not None:
                program.created_at = created_at
            s.add(program)
            s.commit()
            return program

    return _add


class InMemoryObjectStore(ObjectStore):
    """Object store over a ``{(bucket, key): bytes}`` mapping; records every read."""

    def __init__(self, objects: dict[tuple[str, str], bytes] | None = None) -> None:
        self.objects = dict(objects or {})
        self.reads: list[tuple[str, str]] = []

    def put(self, bucket: str, key: str, text: str) -> None:
        self.objects[(bucket, key)] = text.encode("utf-8")

    def get_object(self, bucket: str, key: str) -> bytes:
        self.reads.append((bucket, key))
        try:
            return self.objects[(bucket, key)]
        except KeyError as exc:
            raise ObjectStoreError(f"s3://{bucket}/{key}: NoSuchKey") from exc


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()
