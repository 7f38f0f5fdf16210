from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache

from sqlalchemy import DateTime, create_engine, event
from sqlalchemy.engine import Dialect, Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.schema import MetaData
from sqlalchemy.types import TypeDecorator

from .settings import settings

# Deterministic constraint/index names (prevents Alembic churn)
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class UTCDateTime(TypeDecorator[datetime]):
    """Timestamp column that always stores UTC and always loads timezone-aware values.

    Dialects without a timezone-aware type (SQLite) receive naive UTC values.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("datetime must be timezone-aware")
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def _connect_args(url: str) -> dict[str, object]:
    connect_args: dict[str, object] = {}
    if "sqlite" in url:
        connect_args["check_same_thread"] = False
    elif "postgresql" in url:
        connect_args["connect_timeout"] = settings.connect_timeout
    return connect_args


def _set_search_path(dbapi_conn, _) -> None:
    with dbapi_conn.cursor() as cur:
        cur.execute("SET search_path TO public")


def create_db_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine for ``url`` with the project's connection defaults."""
    kwargs: dict[str, object] = {
        "echo": echo,
        "pool_pre_ping": True,
        "future": True,
        "connect_args": _connect_args(url),
    }
    if "postgresql" in url:
        kwargs.update(
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_timeout=settings.pool_timeout,
        )
    eng = create_engine(url, **kwargs)
    if eng.dialect.name == "postgresql":
        event.listen(eng, "connect", _set_search_path)
    return eng


@lru_cache(maxsize=None)
def _default_engine() -> Engine:
    return create_db_engine(settings.database_url, echo=settings.echo_sql)


def get_engine(db_url: str | None = None, for_test: bool = False) -> Engine:
    """Get or create a database engine.

    If ``for_test`` is True and ``settings.test_database_url`` is set, that URL is used.
    Otherwise falls back to the provided ``db_url`` or the default ``settings.database_url``.
    Returns the shared engine when using the default, to avoid unnecessary engine creation.
    """
    if for_test and settings.test_database_url:
        chosen_url = settings.test_database_url
    else:
        chosen_url = db_url or settings.database_url

    if chosen_url == settings.database_url:
        return _default_engine()
    return create_db_engine(chosen_url)


def get_sessionmaker(for_test: bool = False) -> sessionmaker:
    """Get a session factory bound to the default (or test) engine."""
    return sessionmaker(
        bind=get_engine(for_test=for_test),
        autoflush=False,
        autocommit=False,
        future=True,
        expire_on_commit=False,
    )
