"""
Tests for RecordStore against a file-backed SQLite database.

Tests verify:
- Batch insert writes all rows and reports the inserted count.
- Re-inserting existing (unit_serial, ts) rows is a no-op.
- count() respects the half-open [start, end) window and the unit filter.
- fetch() returns UTC-aware records ordered by unit and time.
- summarize_days() groups by UTC date, newest first.
- PostgreSQL day grouping shifts timestamps to UTC before taking the date.
- Timeouts and database errors surface as StoreUnavailable.

CHANGELOG:
- 2026-10-18: Cover UTC day bucketing for PostgreSQL
- 2026-10-09: Initial creation

TODO:
- None
"""

import asyncio
from datetime import UTC, date, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import OperationalError

from solar_datagen.errors import StoreUnavailable
from solar_datagen.generation.synthesizer import day_start, slot_timestamps
from solar_datagen.models import EnergyRecord
from solar_datagen.services.store import DaySummary, RecordStore, utc_day_column


def _day_records(serial: str, day: date, energy: float = 100.0) -> list[EnergyRecord]:
    return [
        EnergyRecord(
            unit_serial=serial,
            unit_id=f"id-{serial}",
            ts=ts,
            energy_generated=energy,
            peak_power=energy * 1.2,
            efficiency=90.0,
            temperature=30.0,
            anomaly_kind="SUDDEN_DROP" if ts.hour == 12 else None,
        )
        for ts in slot_timestamps(day)
    ]


class TestInsertAndCount:
    """Batch insert, conflict skipping and counting."""

    @pytest.mark.asyncio
    async def test_insert_batch_inserts_all(self, store: RecordStore) -> None:
        day = date(2025, 12, 1)
        inserted = await store.insert_batch(_day_records("SU-0001", day))
        assert inserted == 12
        start = day_start(day)
        assert await store.count("SU-0001", start, start + timedelta(days=1)) == 12

    @pytest.mark.asyncio
    async def test_reinsert_is_noop(self, store: RecordStore) -> None:
        day = date(2025, 12, 1)
        await store.insert_batch(_day_records("SU-0001", day))
        assert await store.insert_batch(_day_records("SU-0001", day, 999.0)) == 0
        rows = await store.fetch(day_start(day), day_start(day) + timedelta(days=1))
        assert len(rows) == 12
        assert all(r.energy_generated == 100.0 for r in rows)

    @pytest.mark.asyncio
    async def test_empty_batch(self, store: RecordStore) -> None:
        assert await store.insert_batch([]) == 0

    @pytest.mark.asyncio
    async def test_count_window_is_half_open(self, store: RecordStore) -> None:
        await store.insert_batch(_day_records("SU-0001", date(2025, 12, 1)))
        await store.insert_batch(_day_records("SU-0001", date(2025, 12, 2)))
        start = day_start(date(2025, 12, 2))
        assert await store.count("SU-0001", start, start + timedelta(days=1)) == 12

    @pytest.mark.asyncio
    async def test_count_filters_by_unit(self, store: RecordStore) -> None:
        day = date(2025, 12, 1)
        await store.insert_batch(_day_records("SU-0001", day))
        start = day_start(day)
        assert await store.count("SU-0002", start, start + timedelta(days=1)) == 0


class TestFetch:
    """Fetched records are UTC-aware and ordered."""

    @pytest.mark.asyncio
    async def test_fetch_round_trip(self, store: RecordStore) -> None:
        day = date(2025, 12, 1)
        original = _day_records("SU-0002", day) + _day_records("SU-0001", day)
        await store.insert_batch(original)
        rows = await store.fetch(day_start(day), day_start(day) + timedelta(days=1))
        assert [r.unit_serial for r in rows] == ["SU-0001"] * 12 + ["SU-0002"] * 12
        assert rows[0].ts == datetime(2025, 12, 1, tzinfo=UTC)
        assert rows[0].ts.tzinfo is not None
        assert rows[6].anomaly_kind == "SUDDEN_DROP"
        assert rows[5].anomaly_kind is None

    @pytest.mark.asyncio
    async def test_fetch_single_unit(self, store: RecordStore) -> None:
        day = date(2025, 12, 1)
        await store.insert_batch(_day_records("SU-0001", day))
        await store.insert_batch(_day_records("SU-0002", day))
        rows = await store.fetch(
            day_start(day), day_start(day) + timedelta(days=1), unit_serial="SU-0002"
        )
        assert {r.unit_serial for r in rows} == {"SU-0002"}


class TestSummaries:
    """Per-day aggregates and administrative reset."""

    @pytest.mark.asyncio
    async def test_summarize_days(self, store: RecordStore) -> None:
        await store.insert_batch(_day_records("SU-0001", date(2025, 12, 1), 10.0))
        await store.insert_batch(_day_records("SU-0002", date(2025, 12, 1), 5.0))
        await store.insert_batch(_day_records("SU-0001", date(2025, 12, 2), 1.0))

        summaries = await store.summarize_days()

        assert summaries == [
            DaySummary(date(2025, 12, 2), 12, 12.0, ("SU-0001",)),
            DaySummary(date(2025, 12, 1), 24, 180.0, ("SU-0001", "SU-0002")),
        ]
        assert summaries[1].to_dict() == {
            "date": "2025-12-01",
            "count": 24,
            "total_energy": 180.0,
            "units": ["SU-0001", "SU-0002"],
        }

    @pytest.mark.asyncio
    async def test_summarize_since(self, store: RecordStore) -> None:
        await store.insert_batch(_day_records("SU-0001", date(2025, 12, 1)))
        await store.insert_batch(_day_records("SU-0001", date(2025, 12, 2)))
        summaries = await store.summarize_days(since=day_start(date(2025, 12, 2)))
        assert [s.day for s in summaries] == [date(2025, 12, 2)]

    @pytest.mark.asyncio
    async def test_summarize_empty(self, store: RecordStore) -> None:
        assert await store.summarize_days() == []

    def test_postgresql_day_is_taken_in_utc(self) -> None:
        sql = str(
            utc_day_column("postgresql").compile(
                dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}
            )
        )
        assert sql.startswith("date(")
        assert "timezone('UTC', energy_generation_records.ts)" in sql

    def test_sqlite_day_uses_stored_utc_text(self) -> None:
        sql = str(utc_day_column("sqlite").compile(dialect=sqlite.dialect()))
        assert "timezone" not in sql
        assert sql.startswith("date(")

    @pytest.mark.asyncio
    async def test_delete_all(self, store: RecordStore) -> None:
        await store.insert_batch(_day_records("SU-0001", date(2025, 12, 1)))
        assert await store.delete_all() == 12
        assert await store.summarize_days() == []


class TestStoreErrors:
    """Failures are reported as StoreUnavailable."""

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        class _SlowSession:
            async def __aenter__(self):
                await asyncio.sleep(1)
                return self

            async def __aexit__(self, *exc_info):
                return False

        store = RecordStore(MagicMock(return_value=_SlowSession()), timeout_s=0.01)
        with pytest.raises(StoreUnavailable, match="timed out"):
            await store.count("SU-0001", datetime.now(UTC), datetime.now(UTC))

    @pytest.mark.asyncio
    async def test_database_error(self) -> None:
        class _BrokenSession:
            async def __aenter__(self):
                raise OperationalError("SELECT 1", {}, Exception("connection refused"))

            async def __aexit__(self, *exc_info):
                return False

        store = RecordStore(MagicMock(return_value=_BrokenSession()), timeout_s=1.0)
        with pytest.raises(StoreUnavailable, match="count failed"):
            await store.count("SU-0001", datetime.now(UTC), datetime.now(UTC))
