"""
Record store backed by the energy_generation_records table.

Every public call opens its own session from the session factory and is
bounded by a timeout, so concurrent generation runs never share a session
and a hung database surfaces as StoreUnavailable instead of blocking a run.

Batch inserts use INSERT ... ON CONFLICT (unit_serial, ts) DO NOTHING in a
single transaction: a day's 12 rows land together or not at all, and rows
that already exist are skipped rather than duplicated.

CHANGELOG:
- 2026-10-18: Group summaries by UTC date on PostgreSQL regardless of session TimeZone
- 2026-10-07: Add summarize_days and delete_all for the data-check and seeding tools
- 2026-10-04: Initial creation

TODO:
- None
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from solar_datagen.db.models import EnergyGenerationRecord
from solar_datagen.errors import StoreUnavailable
from solar_datagen.models import EnergyRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")

_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


@dataclass(frozen=True)
class DaySummary:
    """Aggregate of all records stored for one UTC date."""

    day: date
    count: int
    total_energy: float
    units: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "count": self.count,
            "total_energy": round(self.total_energy, 2),
            "units": list(self.units),
        }


def _as_utc(ts: datetime) -> datetime:
    """Attach UTC to naive timestamps returned by backends without tz support."""
    return ts.replace(tzinfo=UTC) if ts.tzinfo is None else ts.astimezone(UTC)


def utc_day_column(dialect_name: str):
    """Day bucket of a record timestamp, taken in UTC.

    PostgreSQL casts timestamptz to date in the session TimeZone, so the
    timestamp is shifted to UTC first. SQLite stores naive UTC text.
    """
    ts = EnergyGenerationRecord.ts
    if dialect_name == "postgresql":
        return func.date(func.timezone("UTC", ts))
    return func.date(ts)


def _as_date(value: object) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


class RecordStore:
    """Async access to persisted energy records.

    Args:
        session_factory: Factory producing AsyncSession instances.
        timeout_s: Upper bound for a single store call in seconds.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout_s: float = 10.0,
    ) -> None:
        self._session_factory = session_factory
        self._timeout_s = timeout_s

    async def _call(
        self, operation: str, fn: Callable[[AsyncSession], Awaitable[T]]
    ) -> T:
        """Run ``fn`` in a fresh session under the store timeout.

        Raises:
            StoreUnavailable: On timeout, database or connection errors.
        """

        async def _with_session() -> T:
            async with self._session_factory() as session:
                return await fn(session)

        try:
            return await asyncio.wait_for(_with_session(), timeout=self._timeout_s)
        except TimeoutError as exc:
            raise StoreUnavailable(
                f"Record store {operation} timed out after {self._timeout_s}s"
            ) from exc
        except (SQLAlchemyError, OSError) as exc:
            raise StoreUnavailable(f"Record store {operation} failed: {exc}") from exc

    async def count(self, unit_serial: str, start: datetime, end: datetime) -> int:
        """Count records of ``unit_serial`` with ``start <= ts < end``."""

        async def _count(session: AsyncSession) -> int:
            stmt = (
                select(func.count())
                .select_from(EnergyGenerationRecord)
                .where(
                    EnergyGenerationRecord.unit_serial == unit_serial,
                    EnergyGenerationRecord.ts >= start,
                    EnergyGenerationRecord.ts < end,
                )
            )
            return int((await session.execute(stmt)).scalar_one())

        return await self._call("count", _count)

    async def insert_batch(self, records: Sequence[EnergyRecord]) -> int:
        """Insert ``records`` in one transaction, skipping existing (unit_serial, ts).

        Returns:
            int: Number of rows actually inserted.
        """
        if not records:
            return 0
        rows = [record.model_dump() for record in records]

        async def _insert(session: AsyncSession) -> int:
            dialect = session.get_bind().dialect.name
            insert = _DIALECT_INSERTS.get(dialect)
            if insert is None:
                raise StoreUnavailable(f"Unsupported database dialect '{dialect}'")
            stmt = (
                insert(EnergyGenerationRecord)
                .values(rows)
                .on_conflict_do_nothing(index_elements=["unit_serial", "ts"])
            )
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount

        inserted = await self._call("insert", _insert)
        logger.debug(
            "Inserted %d/%d records for unit %s",
            inserted,
            len(rows),
            rows[0]["unit_serial"],
        )
        return inserted

    async def fetch(
        self,
        start: datetime,
        end: datetime,
        unit_serial: str | None = None,
    ) -> list[EnergyRecord]:
        """Return records with ``start <= ts < end``, ordered by unit and time."""

        async def _fetch(session: AsyncSession) -> list[EnergyRecord]:
            stmt = select(EnergyGenerationRecord).where(
                EnergyGenerationRecord.ts >= start,
                EnergyGenerationRecord.ts < end,
            )
            if unit_serial is not None:
                stmt = stmt.where(EnergyGenerationRecord.unit_serial == unit_serial)
            stmt = stmt.order_by(
                EnergyGenerationRecord.unit_serial, EnergyGenerationRecord.ts
            )
            rows = (await session.execute(stmt)).scalars().all()
            return [
                EnergyRecord(
                    unit_serial=row.unit_serial,
                    unit_id=row.unit_id,
                    ts=_as_utc(row.ts),
                    energy_generated=row.energy_generated,
                    peak_power=row.peak_power,
                    efficiency=row.efficiency,
                    temperature=row.temperature,
                    anomaly_kind=row.anomaly_kind,
                )
                for row in rows
            ]

        return await self._call("fetch", _fetch)

    async def summarize_days(self, since: datetime | None = None) -> list[DaySummary]:
        """Group stored records by UTC date, newest date first.

        Args:
            since: Only include records with ``ts >= since``; all when None.
        """

        async def _summarize(session: AsyncSession) -> list[tuple]:
            dialect = session.get_bind().dialect.name
            day_col = utc_day_column(dialect).label("day")
            stmt = select(
                day_col,
                EnergyGenerationRecord.unit_serial,
                func.count().label("count"),
                func.coalesce(func.sum(EnergyGenerationRecord.energy_generated), 0.0),
            )
            if since is not None:
                stmt = stmt.where(EnergyGenerationRecord.ts >= since)
            stmt = stmt.group_by(day_col, EnergyGenerationRecord.unit_serial)
            return [tuple(row) for row in (await session.execute(stmt)).all()]

        grouped: dict[date, list[tuple[str, int, float]]] = {}
        for day_value, serial, count, energy in await self._call(
            "summary", _summarize
        ):
            grouped.setdefault(_as_date(day_value), []).append(
                (serial, int(count), float(energy))
            )

        return [
            DaySummary(
                day=day,
                count=sum(count for _, count, _ in entries),
                total_energy=sum(energy for _, _, energy in entries),
                units=tuple(sorted(serial for serial, _, _ in entries)),
            )
            for day, entries in sorted(grouped.items(), reverse=True)
        ]

    async def delete_all(self) -> int:
        """Delete every stored record (administrative reset). Returns rows deleted."""

        async def _delete(session: AsyncSession) -> int:
            result = await session.execute(delete(EnergyGenerationRecord))
            await session.commit()
            return result.rowcount

        deleted = await self._call("delete", _delete)
        logger.warning("Deleted %d energy records (administrative reset)", deleted)
        return deleted
