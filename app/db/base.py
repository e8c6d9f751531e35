"""Async SQLAlchemy engine, session factory and declarative base."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./ledger.db"


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


def get_database_url() -> str:
    return get_settings().DATABASE_URL or DEFAULT_DATABASE_URL


def _engine_kwargs(url: str) -> dict:
    # An in-memory SQLite database only lives as long as its connection,
    # so every session has to share one.
    if url.startswith("sqlite") and ":memory:" in url:
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {"pool_pre_ping": True}


_database_url = get_database_url()

engine = create_async_engine(
    _database_url,
    echo=False,
    future=True,
    **_engine_kwargs(_database_url),
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)
