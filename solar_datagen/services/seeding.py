"""
Historical seeding with the seasonal curve and the anomaly catalog.

Fills one serial's records for every 2-hour slot of a date range using the
month-banded SeasonalCurve, so anomaly detection has a known set of faults
to find. This path never feeds the scheduler: its values are not
capacity-scaled.

CHANGELOG:
- 2026-10-07: Initial creation
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import date, timedelta

from solar_datagen.generation.anomalies import AnomalyCatalog
from solar_datagen.generation.curve import SeasonalCurve
from solar_datagen.generation.synthesizer import RecordSynthesizer, slot_timestamps
from solar_datagen.models import EnergyRecord
from solar_datagen.services.store import RecordStore

logger = logging.getLogger(__name__)

INSERT_CHUNK_SIZE = 1000


@dataclass(frozen=True)
class SeedReport:
    total: int
    anomalous: int
    inserted: int

    @property
    def normal(self) -> int:
        return self.total - self.anomalous

    @property
    def anomaly_percentage(self) -> float:
        return round(100 * self.anomalous / self.total, 1) if self.total else 0.0


def build_seed_records(
    unit_serial: str,
    start: date,
    end: date,
    catalog: AnomalyCatalog | None,
    rng: random.Random | None = None,
) -> list[EnergyRecord]:
    """Build records for every slot of every day in [start, end]."""
    if end < start:
        raise ValueError(f"end date {end} is before start date {start}")
    rng = rng if rng is not None else random.Random()
    curve = SeasonalCurve(rng)
    synthesizer = RecordSynthesizer(catalog=catalog, rng=rng)

    records: list[EnergyRecord] = []
    day = start
    while day <= end:
        for ts in slot_timestamps(day):
            records.append(
                synthesizer.build_slot(
                    unit_serial=unit_serial,
                    unit_id=None,
                    ts=ts,
                    energy=curve.energy(ts.hour, ts.month - 1),
                )
            )
        day += timedelta(days=1)
    return records


async def seed_with_anomalies(
    store: RecordStore,
    *,
    unit_serial: str,
    start: date,
    end: date,
    catalog: AnomalyCatalog | None,
    rng: random.Random | None = None,
    reset: bool = False,
) -> SeedReport:
    """Seed ``unit_serial`` over [start, end], optionally wiping the store first.

    Slots that already exist are left untouched.
    """
    records = build_seed_records(unit_serial, start, end, catalog, rng)
    if reset:
        await store.delete_all()

    inserted = 0
    for offset in range(0, len(records), INSERT_CHUNK_SIZE):
        inserted += await store.insert_batch(records[offset : offset + INSERT_CHUNK_SIZE])

    report = SeedReport(
        total=len(records),
        anomalous=sum(1 for record in records if record.is_anomaly),
        inserted=inserted,
    )
    logger.info(
        "Seeded %s from %s to %s: %d records (%d normal, %d anomalous, %.1f%%), "
        "%d inserted",
        unit_serial,
        start.isoformat(),
        end.isoformat(),
        report.total,
        report.normal,
        report.anomalous,
        report.anomaly_percentage,
        report.inserted,
    )
    return report
