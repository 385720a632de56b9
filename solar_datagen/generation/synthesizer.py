"""
Day synthesizer: the 12 two-hour records for one unit and one UTC day.

Each slot is built from the curve (energy, derived peak power, efficiency,
temperature), then passed through the anomaly catalog. A transform only
replaces energy_generated; afterwards the record is reconciled so that
peak_power never falls below energy_generated and efficiency is 0 whenever
energy_generated is 0.

CHANGELOG:
- 2026-10-04: Expose build_slot for the seeding tool
- 2026-10-03: Initial creation

TODO:
- None
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta

from solar_datagen.generation.anomalies import AnomalyCatalog
from solar_datagen.generation.curve import CurveModel
from solar_datagen.models import EnergyRecord, Unit

SLOT_HOURS = 2
SLOTS_PER_DAY = 24 // SLOT_HOURS
PEAK_POWER_FACTOR = 1.2


def day_start(day: date) -> datetime:
    """Return midnight UTC of ``day``."""
    return datetime.combine(day, time.min, tzinfo=UTC)


def slot_timestamps(day: date) -> list[datetime]:
    """Return the 12 slot starts of ``day``: 00:00, 02:00, ... 22:00 UTC."""
    start = day_start(day)
    return [start + timedelta(hours=SLOT_HOURS * i) for i in range(SLOTS_PER_DAY)]


@dataclass(frozen=True)
class SynthesizedDay:
    """The ordered records of one (unit, day) plus per-record anomaly flags."""

    unit_serial: str
    day: date
    records: tuple[EnergyRecord, ...]

    @property
    def anomaly_flags(self) -> tuple[bool, ...]:
        return tuple(record.is_anomaly for record in self.records)

    @property
    def anomaly_count(self) -> int:
        return sum(self.anomaly_flags)


class RecordSynthesizer:
    """Builds full days of records from the curve and the anomaly catalog.

    Args:
        curve: Capacity-scaled curve model.
        catalog: Anomaly catalog, or None to disable anomalies.
        rng: Random source for efficiency and temperature.
    """

    def __init__(
        self,
        curve: CurveModel | None = None,
        catalog: AnomalyCatalog | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._curve = curve if curve is not None else CurveModel(self._rng)
        self._catalog = catalog

    def synthesize_day(self, unit: Unit, day: date) -> SynthesizedDay:
        """Produce the 12 ordered records for ``unit`` on ``day``."""
        records = tuple(
            self.build_slot(
                unit_serial=unit.serial_number,
                unit_id=unit.id,
                ts=ts,
                energy=self._curve.energy(ts.hour, unit.capacity),
            )
            for ts in slot_timestamps(day)
        )
        return SynthesizedDay(unit_serial=unit.serial_number, day=day, records=records)

    def build_slot(
        self,
        *,
        unit_serial: str,
        unit_id: str | None,
        ts: datetime,
        energy: float,
    ) -> EnergyRecord:
        """Build one record from a base energy value and run it through the catalog."""
        generating = energy > 0
        record = EnergyRecord(
            unit_serial=unit_serial,
            unit_id=unit_id,
            ts=ts,
            energy_generated=energy,
            peak_power=energy * PEAK_POWER_FACTOR if generating else 0.0,
            efficiency=85 + self._rng.random() * 10 if generating else 0.0,
            temperature=25 + self._rng.random() * 15,
        )
        if self._catalog is None:
            return record

        record, rule = self._catalog.apply(ts, record)
        if rule is None:
            return record
        return _reconcile(record)


def _reconcile(record: EnergyRecord) -> EnergyRecord:
    update: dict[str, float] = {}
    if record.energy_generated > record.peak_power:
        update["peak_power"] = record.energy_generated
    if record.energy_generated == 0 and record.efficiency != 0:
        update["efficiency"] = 0.0
    return record.model_copy(update=update) if update else record
