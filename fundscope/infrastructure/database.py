"""Async SQLAlchemy engine, session factory, and declarative base.

The database backs the durable client-side cache only; the server keeps its
caches in memory.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from fundscope.infrastructure.config import get_settings


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""


def make_engine(database_url: str | None = None) -> AsyncEngine:
    return create_async_engine(
        database_url or get_settings().database_url,
        echo=False,
        pool_pre_ping=True,
    )


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables directly (local client stores; servers use Alembic)."""
    import fundscope.infrastructure.persistence.models  # noqa: F401  (registers all mappers)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
