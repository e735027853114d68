from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from shared.config import settings


class Base(DeclarativeBase):
    pass


def create_db_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine, with SQLite-specific connection settings when needed."""
    engine_kwargs: dict[str, Any] = {"echo": echo}
    if url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs["pool_pre_ping"] = True
    return create_async_engine(url, **engine_kwargs)


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = create_db_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
async_session = create_session_factory(engine)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
