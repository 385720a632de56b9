"""
SQLAlchemy ORM models for the record store.

Defines EnergyGenerationRecord, stored in a TimescaleDB hypertable. The
composite primary key (unit_serial, ts) makes a second insert of the same
slot a conflict, which the store turns into an "already generated" skip.

CHANGELOG:
- 2026-10-04: Add nullable anomaly_kind column
- 2026-10-03: Initial creation

TODO:
- None
"""

import datetime

from sqlalchemy import DateTime, Double, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all ORM models."""

    pass


class EnergyGenerationRecord(Base):
    """One persisted 2-hour slot of synthesized generation telemetry.

    Attributes:
        unit_serial: Serial number of the generating unit.
        ts: Slot start in UTC, on the 2-hour grid.
        unit_id: Registry identifier of the unit (nullable for seeded data).
        energy_generated: Energy generated in the slot.
        peak_power: Peak power in the slot.
        efficiency: Efficiency in percent.
        temperature: Panel temperature in Celsius.
        anomaly_kind: Applied anomaly rule kind, or NULL for a normal slot.
    """

    __tablename__ = "energy_generation_records"

    unit_serial: Mapped[str] = mapped_column(
        Text,
        primary_key=True,
        nullable=False,
    )
    ts: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        primary_key=True,
        nullable=False,
    )
    unit_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    energy_generated: Mapped[float] = mapped_column(Double, nullable=False)
    peak_power: Mapped[float] = mapped_column(Double, nullable=False)
    efficiency: Mapped[float] = mapped_column(Double, nullable=False)
    temperature: Mapped[float] = mapped_column(Double, nullable=False)
    anomaly_kind: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        """Return string representation of the EnergyGenerationRecord."""
        return (
            f"EnergyGenerationRecord(unit_serial={self.unit_serial!r}, "
            f"ts={self.ts!r}, energy_generated={self.energy_generated!r})"
        )
