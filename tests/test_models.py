"""
Tests for the pydantic domain models and the EnergyGenerationRecord ORM model.

Validates Unit parsing from registry JSON, EnergyRecord bounds, and the ORM
table name, columns, composite primary key and nullability.

CHANGELOG:
- 2026-10-09: Initial creation

TODO:
- None
"""

import datetime

import pytest
from pydantic import ValidationError
from sqlalchemy import DateTime, Double, Text, inspect

from solar_datagen.db.models import Base, EnergyGenerationRecord
from solar_datagen.models import EnergyRecord, Unit

TS = datetime.datetime(2025, 12, 1, 12, tzinfo=datetime.UTC)


class TestUnit:
    """Unit parsing and defaults."""

    def test_registry_aliases(self) -> None:
        unit = Unit.model_validate(
            {"_id": "abc", "serialNumber": "SU-1", "capacity": 4200, "status": "ACTIVE"}
        )
        assert unit.id == "abc"
        assert unit.serial_number == "SU-1"
        assert unit.capacity == 4200.0
        assert unit.is_active

    def test_field_names_accepted(self) -> None:
        unit = Unit(id="abc", serial_number="SU-1")
        assert unit.capacity == 5000.0
        assert unit.status == "ACTIVE"

    @pytest.mark.parametrize("capacity", [None, 0])
    def test_missing_capacity_defaults(self, capacity: object) -> None:
        unit = Unit.model_validate({"_id": "a", "serialNumber": "SU-1", "capacity": capacity})
        assert unit.capacity == 5000.0

    def test_inactive(self) -> None:
        assert not Unit(id="a", serial_number="SU-1", status="INACTIVE").is_active

    def test_frozen(self) -> None:
        unit = Unit(id="a", serial_number="SU-1")
        with pytest.raises(ValidationError):
            unit.capacity = 1.0


class TestEnergyRecord:
    """Field bounds."""

    def _record(self, **overrides: object) -> EnergyRecord:
        fields = {
            "unit_serial": "SU-1",
            "ts": TS,
            "energy_generated": 100.0,
            "peak_power": 120.0,
            "efficiency": 90.0,
            "temperature": 30.0,
        }
        fields.update(overrides)
        return EnergyRecord(**fields)

    def test_defaults(self) -> None:
        record = self._record()
        assert record.unit_id is None
        assert record.anomaly_kind is None
        assert not record.is_anomaly

    def test_anomaly_flag(self) -> None:
        assert self._record(anomaly_kind="SUDDEN_DROP").is_anomaly

    @pytest.mark.parametrize(
        "overrides",
        [{"energy_generated": -1.0}, {"peak_power": -0.5}, {"efficiency": 101.0},
         {"efficiency": -1.0}],
    )
    def test_out_of_bounds(self, overrides: dict) -> None:
        with pytest.raises(ValidationError):
            self._record(**overrides)


class TestEnergyGenerationRecordTable:
    """ORM mapping of energy_generation_records."""

    def test_table_name(self) -> None:
        assert EnergyGenerationRecord.__tablename__ == "energy_generation_records"

    def test_registered_on_base(self) -> None:
        assert "energy_generation_records" in Base.metadata.tables

    def test_columns(self) -> None:
        mapper = inspect(EnergyGenerationRecord)
        assert {col.key for col in mapper.column_attrs} == {
            "unit_serial",
            "ts",
            "unit_id",
            "energy_generated",
            "peak_power",
            "efficiency",
            "temperature",
            "anomaly_kind",
        }

    def test_composite_primary_key(self) -> None:
        pk = [col.name for col in EnergyGenerationRecord.__table__.primary_key.columns]
        assert pk == ["unit_serial", "ts"]

    def test_column_types(self) -> None:
        columns = EnergyGenerationRecord.__table__.columns
        assert isinstance(columns["unit_serial"].type, Text)
        assert isinstance(columns["ts"].type, DateTime)
        assert columns["ts"].type.timezone is True
        for name in ("energy_generated", "peak_power", "efficiency", "temperature"):
            assert isinstance(columns[name].type, Double)

    def test_nullability(self) -> None:
        columns = EnergyGenerationRecord.__table__.columns
        assert columns["unit_id"].nullable
        assert columns["anomaly_kind"].nullable
        assert not columns["energy_generated"].nullable

    def test_repr(self) -> None:
        row = EnergyGenerationRecord(unit_serial="SU-1", ts=TS, energy_generated=1.5)
        assert "SU-1" in repr(row)
        assert "1.5" in repr(row)
