"""
Idempotent generation of one (unit, day).

A run counts the unit's records inside [day_start, day_start + 24h). Any
existing record means the day is already generated and the run is skipped.
Otherwise the day is synthesized and inserted as one 12-row batch. The count
and the insert are separate store calls; the store's (unit_serial, ts) key
turns a lost race into a zero-row insert, which is also reported as a skip.

CHANGELOG:
- 2026-10-18: Re-count after a retried insert lands zero rows so a committed-but-timed-out attempt counts as generated
- 2026-10-05: Retry failed batch inserts before raising PartialBatchFailure
- 2026-10-04: Initial creation

TODO:
- None
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from enum import StrEnum

from solar_datagen.errors import PartialBatchFailure, StoreUnavailable
from solar_datagen.generation.synthesizer import RecordSynthesizer, day_start
from solar_datagen.models import Unit
from solar_datagen.services.store import RecordStore

logger = logging.getLogger(__name__)


class RunOutcome(StrEnum):
    GENERATED = "generated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class UnitResult:
    """Outcome of one (unit, day) generation.

    Attributes:
        unit_serial: Serial of the unit.
        day: UTC date that was generated.
        outcome: Generated, skipped (already present) or failed.
        records_inserted: Rows written by this run.
        anomalies: Number of inserted records carrying an anomaly.
        error: Error message for failed runs.
    """

    unit_serial: str
    day: date
    outcome: RunOutcome
    records_inserted: int = 0
    anomalies: int = 0
    error: str | None = None


class GenerationRun:
    """Check-then-insert unit of work for one unit and one day.

    Args:
        store: Record store.
        synthesizer: Day synthesizer.
        insert_attempts: Insert attempts before raising PartialBatchFailure.
        retry_delay_s: Base delay between insert attempts (linear backoff).
    """

    def __init__(
        self,
        store: RecordStore,
        synthesizer: RecordSynthesizer,
        insert_attempts: int = 2,
        retry_delay_s: float = 0.5,
    ) -> None:
        self._store = store
        self._synthesizer = synthesizer
        self._insert_attempts = max(1, insert_attempts)
        self._retry_delay_s = retry_delay_s

    async def run(self, unit: Unit, day: date) -> UnitResult:
        """Generate ``day`` for ``unit`` unless it already has data.

        Raises:
            StoreUnavailable: If the existence check fails.
            PartialBatchFailure: If every insert attempt fails.
        """
        start = day_start(day)
        existing = await self._store.count(
            unit.serial_number, start, start + timedelta(days=1)
        )
        if existing > 0:
            logger.info(
                "Skipping unit %s (%s): %d record(s) already exist for %s",
                unit.serial_number,
                unit.name,
                existing,
                day.isoformat(),
            )
            return UnitResult(unit.serial_number, day, RunOutcome.SKIPPED)

        synthesized = self._synthesizer.synthesize_day(unit, day)
        inserted, retried = await self._insert_with_retry(
            unit, day, synthesized.records
        )

        if inserted == 0 and retried:
            # An earlier attempt may have committed before it timed out.
            stored = await self._store.count(
                unit.serial_number, start, start + timedelta(days=1)
            )
            if stored >= len(synthesized.records):
                inserted = stored

        if inserted == 0:
            logger.info(
                "Unit %s already generated for %s by a concurrent writer",
                unit.serial_number,
                day.isoformat(),
            )
            return UnitResult(unit.serial_number, day, RunOutcome.SKIPPED)

        logger.info(
            "Generated %d records (%d anomalous) for unit %s on %s",
            inserted,
            synthesized.anomaly_count,
            unit.serial_number,
            day.isoformat(),
        )
        return UnitResult(
            unit.serial_number,
            day,
            RunOutcome.GENERATED,
            records_inserted=inserted,
            anomalies=synthesized.anomaly_count,
        )

    async def _insert_with_retry(
        self, unit: Unit, day: date, records
    ) -> tuple[int, bool]:
        """Insert the batch, returning (rows inserted, whether an attempt failed)."""
        last_error: StoreUnavailable | None = None
        for attempt in range(1, self._insert_attempts + 1):
            try:
                return await self._store.insert_batch(records), last_error is not None
            except StoreUnavailable as exc:
                last_error = exc
                logger.warning(
                    "Insert attempt %d/%d failed for unit %s on %s: %s",
                    attempt,
                    self._insert_attempts,
                    unit.serial_number,
                    day.isoformat(),
                    exc,
                )
                if attempt < self._insert_attempts:
                    await asyncio.sleep(self._retry_delay_s * attempt)

        raise PartialBatchFailure(
            f"Batch insert for unit {unit.serial_number} on {day.isoformat()} "
            f"failed after {self._insert_attempts} attempt(s): {last_error}"
        ) from last_error
