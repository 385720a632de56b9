"""
Shared test fixtures.

Provides isolated environment variables, a file-backed SQLite record store
(aiosqlite) for round-trip tests, unit factories, a fixed clock, and a
FastAPI TestClient whose lifespan runs with the daily timer disabled.

CHANGELOG:
- 2026-10-09: Initial creation
"""

from __future__ import annotations

import random
from collections.abc import AsyncGenerator, Generator
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from solar_datagen.db.models import Base
from solar_datagen.db.session import create_engine, create_session_factory
from solar_datagen.models import Unit
from solar_datagen.services.store import RecordStore

ADMIN_TOKEN = "test-admin-token"
FIXED_NOW = datetime(2025, 12, 20, 15, 30, tzinfo=UTC)

# All DatagenSettings environment variable names, used for cleanup.
_ALL_ENV_VARS = (
    "DATABASE_URL",
    "REGISTRY_BASE_URL",
    "REGISTRY_UNITS_PATH",
    "REGISTRY_TIMEOUT_S",
    "STORE_TIMEOUT_S",
    "REDIS_URL",
    "CACHE_TTL_S",
    "MAX_WORKERS",
    "INSERT_ATTEMPTS",
    "SCHEDULE_TIMEZONE",
    "SCHEDULER_ENABLED",
    "ANOMALIES_ENABLED",
    "ANOMALY_RULES_PATH",
    "RANDOM_SEED",
    "ADMIN_TOKEN",
    "DEFAULT_BACKFILL_DAYS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Remove all service env vars and isolate from .env files before each test."""
    for var in _ALL_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def env_required(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> dict[str, str]:
    """Set only the required environment variables."""
    env = {
        "DATABASE_URL": f"sqlite+aiosqlite:///{tmp_path / 'env.db'}",
        "REGISTRY_BASE_URL": "https://core.example.com",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env


@pytest.fixture()
def fixed_clock():
    """Clock returning 2025-12-20 15:30 UTC."""
    return lambda: FIXED_NOW


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(1234)


def _make_unit(
    serial: str = "SU-0001",
    capacity: float = 5000.0,
    status: str = "ACTIVE",
    name: str | None = None,
) -> Unit:
    """Build a Unit with sensible defaults."""
    return Unit(
        id=f"id-{serial}",
        serial_number=serial,
        capacity=capacity,
        name=name or f"Unit {serial}",
        status=status,
    )


@pytest.fixture()
def make_unit():
    """Factory fixture building Unit instances."""
    return _make_unit


@pytest.fixture()
def units() -> list[Unit]:
    return [
        _make_unit("SU-0001"),
        _make_unit("SU-0002", 3000.0),
        _make_unit("SU-0003", 8000.0),
    ]


@pytest.fixture()
def fake_registry(units: list[Unit]) -> AsyncMock:
    """Registry double returning the ``units`` fixture."""
    registry = AsyncMock()
    registry.fetch_active_units = AsyncMock(return_value=units)
    return registry


@pytest_asyncio.fixture()
async def store(tmp_path: Path) -> AsyncGenerator[RecordStore, None]:
    """RecordStore over a fresh file-backed SQLite database."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'records.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield RecordStore(create_session_factory(engine), timeout_s=5.0)
    await engine.dispose()


@pytest.fixture()
def client(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[TestClient, None, None]:
    """FastAPI TestClient with lifespan, timer disabled and an admin token set."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")
    monkeypatch.setenv("REGISTRY_BASE_URL", "https://core.example.com")
    monkeypatch.setenv("SCHEDULER_ENABLED", "false")
    monkeypatch.setenv("ADMIN_TOKEN", ADMIN_TOKEN)

    from solar_datagen.api.main import app

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
