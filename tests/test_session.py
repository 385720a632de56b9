"""
Tests for the async engine and session factory helpers.

CHANGELOG:
- 2026-10-09: Initial creation

TODO:
- None
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from solar_datagen.db.session import create_engine, create_session_factory, get_database_url


class TestDatabaseUrl:
    def test_missing(self) -> None:
        with pytest.raises(RuntimeError, match="DATABASE_URL"):
            get_database_url()

    def test_from_env(self, env_required: dict[str, str]) -> None:
        assert get_database_url() == env_required["DATABASE_URL"]


class TestEngineFactory:
    @pytest.mark.asyncio
    async def test_engine_from_env(self, env_required: dict[str, str]) -> None:
        engine = create_engine()
        assert isinstance(engine, AsyncEngine)
        assert engine.dialect.name == "sqlite"
        await engine.dispose()

    @pytest.mark.asyncio
    async def test_session_factory(self, env_required: dict[str, str]) -> None:
        engine = create_engine()
        factory = create_session_factory(engine)
        async with factory() as session:
            assert session.get_bind().dialect.name == "sqlite"
        await engine.dispose()
