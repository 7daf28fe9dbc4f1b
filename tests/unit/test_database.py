"""Unit tests for fundscope/infrastructure/config.py and database.py.

Tests cover Settings defaults, env var override, and object types.
No database connection is required.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from fundscope.infrastructure.config import Settings
from fundscope.infrastructure.database import Base, make_engine, make_session_factory


def test_settings_default_url_uses_aiosqlite():
    assert Settings().database_url.startswith("sqlite+aiosqlite:///")


def test_settings_reads_database_url_from_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./elsewhere.db")
    assert Settings().database_url == "sqlite+aiosqlite:///./elsewhere.db"


def test_settings_pipeline_defaults():
    settings = Settings()
    assert settings.cache_ttl_hours == 24
    assert settings.enrich_chunk_size == 5
    assert settings.enrich_pacing_seconds == 0.2
    assert settings.ratio_batch_limit == 10
    assert settings.aggregate_concurrency == 4


def test_settings_reads_batch_limit_from_env(monkeypatch):
    monkeypatch.setenv("RATIO_BATCH_LIMIT", "3")
    assert Settings().ratio_batch_limit == 3


def test_base_is_declarative_base():
    assert issubclass(Base, DeclarativeBase)


def test_cache_table_registered_on_base():
    import fundscope.infrastructure.persistence.models  # noqa: F401

    assert "cache_entries" in Base.metadata.tables


def test_engine_is_async():
    assert isinstance(make_engine("sqlite+aiosqlite:///:memory:"), AsyncEngine)


def test_session_factory_produces_async_sessions():
    factory = make_session_factory(make_engine("sqlite+aiosqlite:///:memory:"))
    assert isinstance(factory, async_sessionmaker)
    assert factory.class_ is AsyncSession
