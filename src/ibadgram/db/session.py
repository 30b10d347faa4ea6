"""Async engine and session factory helpers."""

from __future__ import annotations

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .models import Base


def async_database_url(raw_url: str) -> str:
    """Return ``raw_url`` with an async-capable driver.

    PostgreSQL goes through psycopg (sync and async in one driver), SQLite
    through aiosqlite. Explicit drivers are kept.
    """

    url = make_url(raw_url)
    driver = url.drivername
    if driver in ("postgresql", "postgres"):
        url = url.set(drivername="postgresql+psycopg")
    elif driver == "sqlite":
        url = url.set(drivername="sqlite+aiosqlite")
    return url.render_as_string(hide_password=False)


def create_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    url = async_database_url(database_url)
    options: dict[str, object] = {"echo": echo}
    if url.startswith("postgresql"):
        options["isolation_level"] = "READ COMMITTED"
        options["pool_pre_ping"] = True
    return create_async_engine(url, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_models(engine: AsyncEngine) -> None:
    """Create all tables; migrations are the production path."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_models(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


__all__ = [
    "async_database_url",
    "create_engine",
    "create_session_factory",
    "drop_models",
    "init_models",
]
