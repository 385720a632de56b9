"""
Pydantic models for units and synthesized energy records.

Unit mirrors the registry's JSON payload (camelCase, Mongo-style ``_id``).
EnergyRecord is the immutable value produced by the synthesizer and handed
to the record store.

CHANGELOG:
- 2026-10-18: Accept numeric registry ids and serial numbers as strings
- 2026-10-04: Persist optional anomaly_kind alongside each record
- 2026-10-02: Initial creation
"""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DEFAULT_CAPACITY_W = 5000.0
ACTIVE_STATUS = "ACTIVE"


class Unit(BaseModel):
    """A solar-generation unit as reported by the external registry.

    Attributes:
        id: Opaque registry identifier.
        serial_number: Serial used as the record key.
        capacity: Nameplate capacity in watts. Missing or zero falls back
            to 5000 W.
        name: Human-readable name, used in log lines.
        status: Registry status; only ``ACTIVE`` units are generated for.
    """

    model_config = ConfigDict(
        populate_by_name=True, frozen=True, coerce_numbers_to_str=True
    )

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    serial_number: str = Field(
        validation_alias=AliasChoices("serialNumber", "serial_number")
    )
    capacity: float = DEFAULT_CAPACITY_W
    name: str = ""
    status: str = ACTIVE_STATUS

    @field_validator("capacity", mode="before")
    @classmethod
    def _default_capacity(cls, v: object) -> object:
        """Treat a missing, null or zero capacity as the 5 kW default."""
        if not v:
            return DEFAULT_CAPACITY_W
        return v

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE_STATUS


class EnergyRecord(BaseModel):
    """One 2-hour slot of synthesized generation telemetry.

    Attributes:
        unit_serial: Serial number of the generating unit.
        unit_id: Registry identifier of the unit (None for seeded data).
        ts: Slot start in UTC, always on an even hour.
        energy_generated: Energy for the slot, never negative.
        peak_power: Peak power, never below energy_generated.
        efficiency: Percent in [0, 100]; 0 whenever energy_generated is 0.
        temperature: Panel temperature in degrees Celsius.
        anomaly_kind: Name of the anomaly rule applied, or None.
    """

    model_config = ConfigDict(frozen=True)

    unit_serial: str
    unit_id: str | None = None
    ts: datetime
    energy_generated: float = Field(ge=0)
    peak_power: float = Field(ge=0)
    efficiency: float = Field(ge=0, le=100)
    temperature: float
    anomaly_kind: str | None = None

    @property
    def is_anomaly(self) -> bool:
        return self.anomaly_kind is not None
