"""
Anomaly catalog: date/time-windowed overrides of synthesized energy values.

Rules are held in an ordered list and scanned linearly; the first rule whose
selector matches a slot's (date, hour) is applied and the scan stops, so at
most one rule affects any record. The catalog is built once at startup,
either from DEFAULT_RULES or from a JSON rules file, and never mutated.

Rule kinds:
- ZERO_GENERATION: energy forced to 0.
- SUDDEN_DROP: energy * 0.3, rounded.
- CAPACITY_FACTOR: energy * 0.4, rounded.
- IRREGULAR_PATTERN: energy * 2.5 or * 0.4 (coin flip), rounded.
- IRREGULAR_PATTERN_NIGHT: energy replaced by U[50, 150).

CHANGELOG:
- 2026-10-06: Load rules from JSON (anomaly_rules_path)
- 2026-10-03: Initial creation

TODO:
- None
"""

from __future__ import annotations

import datetime as dt
import json
import logging
import math
import random
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, TypeAdapter, model_validator

from solar_datagen.models import EnergyRecord

logger = logging.getLogger(__name__)

NIGHT_BEFORE_HOUR = 6
NIGHT_AFTER_HOUR = 20


class AnomalyKind(StrEnum):
    ZERO_GENERATION = "ZERO_GENERATION"
    SUDDEN_DROP = "SUDDEN_DROP"
    CAPACITY_FACTOR = "CAPACITY_FACTOR"
    IRREGULAR_PATTERN = "IRREGULAR_PATTERN"
    IRREGULAR_PATTERN_NIGHT = "IRREGULAR_PATTERN_NIGHT"


# ---------------------------------------------------------------------------
# Date selectors
# ---------------------------------------------------------------------------


class DateSelector(Protocol):
    def matches(self, day: date, hour: int) -> bool: ...


@dataclass(frozen=True)
class DaySelector:
    """One calendar date, optionally restricted to hours in [start_hour, end_hour)."""

    day: date
    start_hour: int | None = None
    end_hour: int | None = None

    def __post_init__(self) -> None:
        if (self.start_hour is None) != (self.end_hour is None):
            raise ValueError("start_hour and end_hour must be given together")
        if self.start_hour is not None and not (
            0 <= self.start_hour < self.end_hour <= 24  # type: ignore[operator]
        ):
            raise ValueError(
                f"invalid hour range [{self.start_hour}, {self.end_hour})"
            )

    def matches(self, day: date, hour: int) -> bool:
        if day != self.day:
            return False
        if self.start_hour is None:
            return True
        return self.start_hour <= hour < self.end_hour  # type: ignore[operator]


@dataclass(frozen=True)
class NightSelector:
    """One calendar date, only for hours before 06:00 or after 20:00."""

    day: date

    def matches(self, day: date, hour: int) -> bool:
        return day == self.day and (
            hour < NIGHT_BEFORE_HOUR or hour > NIGHT_AFTER_HOUR
        )


@dataclass(frozen=True)
class DateRangeSelector:
    """Every hour of every date in the closed range [start, end]."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"date range ends before it starts ({self.start}..{self.end})")

    def matches(self, day: date, hour: int) -> bool:
        return self.start <= day <= self.end


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def _round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))


@dataclass(frozen=True)
class AnomalyRule:
    """A selector plus the transform implied by the rule kind."""

    kind: AnomalyKind
    selector: DateSelector

    def transform(self, energy: float, rng: random.Random) -> float:
        """Return the overridden energy value for a matched slot (never negative)."""
        if self.kind is AnomalyKind.ZERO_GENERATION:
            result = 0.0
        elif self.kind is AnomalyKind.SUDDEN_DROP:
            result = _round_half_up(energy * 0.3)
        elif self.kind is AnomalyKind.CAPACITY_FACTOR:
            result = _round_half_up(energy * 0.4)
        elif self.kind is AnomalyKind.IRREGULAR_PATTERN:
            spike = 2.5 if rng.random() > 0.5 else 0.4
            result = _round_half_up(energy * spike)
        else:
            result = 50 + rng.random() * 100
        return max(0.0, result)


DEFAULT_RULES: tuple[AnomalyRule, ...] = (
    # 4-hour outage
    AnomalyRule(
        AnomalyKind.ZERO_GENERATION,
        DaySelector(date(2025, 12, 1), start_hour=10, end_hour=14),
    ),
    # 70% reduction for 6 hours
    AnomalyRule(
        AnomalyKind.SUDDEN_DROP,
        DaySelector(date(2025, 12, 5), start_hour=9, end_hour=15),
    ),
    # A week of low output
    AnomalyRule(
        AnomalyKind.CAPACITY_FACTOR,
        DateRangeSelector(date(2025, 12, 10), date(2025, 12, 16)),
    ),
    AnomalyRule(AnomalyKind.IRREGULAR_PATTERN, DaySelector(date(2025, 12, 8))),
    # Sensor error: generation reported at night
    AnomalyRule(AnomalyKind.IRREGULAR_PATTERN_NIGHT, NightSelector(date(2025, 12, 3))),
)


class AnomalyCatalog:
    """Ordered, first-match-wins set of anomaly rules.

    Args:
        rules: Rules in priority order.
        rng: Random source used by the randomized transforms.
    """

    def __init__(
        self,
        rules: Sequence[AnomalyRule] = DEFAULT_RULES,
        rng: random.Random | None = None,
    ) -> None:
        self._rules: tuple[AnomalyRule, ...] = tuple(rules)
        self._rng = rng if rng is not None else random.Random()

    @property
    def rules(self) -> tuple[AnomalyRule, ...]:
        return self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def match(self, day: date, hour: int) -> AnomalyRule | None:
        """Return the first rule whose selector matches, or None."""
        for rule in self._rules:
            if rule.selector.matches(day, hour):
                return rule
        return None

    def apply(
        self, ts: datetime, record: EnergyRecord
    ) -> tuple[EnergyRecord, AnomalyRule | None]:
        """Apply the first matching rule to ``record``.

        Only ``energy_generated`` and ``anomaly_kind`` are replaced; all
        other fields are carried over from the base record.

        Args:
            ts: Slot timestamp (UTC); its date and hour drive matching.
            record: Base record produced from the curve.

        Returns:
            tuple: The possibly transformed record and the applied rule, or
            the unchanged record and None.
        """
        rule = self.match(ts.date(), ts.hour)
        if rule is None:
            return record, None
        energy = rule.transform(record.energy_generated, self._rng)
        return (
            record.model_copy(
                update={"energy_generated": energy, "anomaly_kind": rule.kind.value}
            ),
            rule,
        )


# ---------------------------------------------------------------------------
# JSON rule files
# ---------------------------------------------------------------------------


class AnomalyRuleConfig(BaseModel):
    """One rule entry of a JSON rules file.

    A rule uses exactly one selector shape: ``date`` (with optional
    ``start_hour``/``end_hour`` or ``night_only``), or
    ``start_date``/``end_date`` for a closed range.
    """

    kind: AnomalyKind
    date: dt.date | None = None
    start_hour: int | None = None
    end_hour: int | None = None
    night_only: bool = False
    start_date: dt.date | None = None
    end_date: dt.date | None = None

    @model_validator(mode="after")
    def _one_selector_shape(self) -> AnomalyRuleConfig:
        has_range = self.start_date is not None or self.end_date is not None
        if has_range == (self.date is not None):
            raise ValueError("a rule needs either 'date' or 'start_date'/'end_date'")
        if has_range and (self.start_date is None or self.end_date is None):
            raise ValueError("'start_date' and 'end_date' must be given together")
        if self.night_only and self.start_hour is not None:
            raise ValueError("'night_only' cannot be combined with an hour range")
        return self

    def to_rule(self) -> AnomalyRule:
        if self.start_date is not None and self.end_date is not None:
            selector: DateSelector = DateRangeSelector(self.start_date, self.end_date)
        elif self.night_only:
            selector = NightSelector(self.date)  # type: ignore[arg-type]
        else:
            selector = DaySelector(
                self.date,  # type: ignore[arg-type]
                start_hour=self.start_hour,
                end_hour=self.end_hour,
            )
        return AnomalyRule(self.kind, selector)


_RULES_ADAPTER = TypeAdapter(list[AnomalyRuleConfig])


def load_rules(path: str | Path) -> list[AnomalyRule]:
    """Read an ordered rule list from a JSON file.

    Raises:
        ValueError: If the file content is not a valid rule list.
        OSError: If the file cannot be read.
    """
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    rules = [entry.to_rule() for entry in _RULES_ADAPTER.validate_python(raw)]
    logger.info("Loaded %d anomaly rule(s) from %s", len(rules), path)
    return rules
