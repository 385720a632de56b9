"""
Solar output curves for a single 2-hour slot.

Two formulas live here and are deliberately kept apart:

- CurveModel: the capacity-scaled ramp/peak/decline curve used by the
  scheduler and backfill. This is the authoritative runtime model.
- SeasonalCurve: the month-banded curve used only by the anomaly seeding
  tool. Its values are not capacity-scaled and are not interchangeable with
  CurveModel output.

CHANGELOG:
- 2026-10-03: Split seeding curve out into SeasonalCurve
- 2026-10-02: Initial creation

TODO:
- None
"""

from __future__ import annotations

import random

# Phase boundaries, in UTC hours.
DAWN_HOUR = 6
PEAK_START_HOUR = 12
PEAK_END_HOUR = 14
DUSK_END_HOUR = 20
NIGHT_START_HOUR = 22

RAMP_FRACTION = 0.7
PEAK_FRACTION = 0.75
EVENING_FRACTION = 0.1

RAMP_VARIATION = 0.10
PEAK_VARIATION = 0.075


def _check_hour(hour: int) -> None:
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be in 0..23 (got {hour})")


class CurveModel:
    """Capacity-scaled solar generation curve.

    Args:
        rng: Random source for the bounded perturbation. Defaults to an
            unseeded ``random.Random``.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()

    def energy(self, hour: int, capacity: float) -> float:
        """Return the generation value for the slot starting at ``hour``.

        - night (hour < 6 or hour >= 22): 0
        - 6..12: linear ramp to 70% of capacity, +/-10%
        - 12..14: 75% of capacity, +/-7.5%
        - 14..20: linear decline from 70% to 0, +/-10%
        - 20..22: up to 10% of capacity, scaled by an independent U(0, 1)

        Args:
            hour: Hour of day, 0..23.
            capacity: Nameplate capacity in watts, must be positive.

        Returns:
            float: Non-negative generation value.

        Raises:
            ValueError: If hour or capacity is out of range.
        """
        _check_hour(hour)
        if capacity <= 0:
            raise ValueError(f"capacity must be positive (got {capacity})")

        if hour < DAWN_HOUR or hour >= NIGHT_START_HOUR:
            return 0.0

        if hour < PEAK_START_HOUR:
            factor = (hour - DAWN_HOUR) / (PEAK_START_HOUR - DAWN_HOUR)
            return self._perturb(capacity * RAMP_FRACTION * factor, RAMP_VARIATION)

        if hour < PEAK_END_HOUR:
            return self._perturb(capacity * PEAK_FRACTION, PEAK_VARIATION)

        if hour < DUSK_END_HOUR:
            factor = 1 - (hour - PEAK_END_HOUR) / (DUSK_END_HOUR - PEAK_END_HOUR)
            return self._perturb(capacity * RAMP_FRACTION * factor, RAMP_VARIATION)

        return max(0.0, capacity * EVENING_FRACTION * self._rng.random())

    def _perturb(self, base: float, spread: float) -> float:
        """Apply a uniform multiplicative variation of +/-spread, clamped at 0."""
        variation = self._rng.random() * 2 * spread - spread
        return max(0.0, base * (1 + variation))


def seasonal_base(month: int) -> float:
    """Return the seeding base value for a zero-based calendar month.

    Months 5-7 -> 300, 2-4 -> 250, 8-10 -> 200, otherwise 150.
    """
    if not 0 <= month <= 11:
        raise ValueError(f"month must be in 0..11 (got {month})")
    if 5 <= month <= 7:
        return 300.0
    if 2 <= month <= 4:
        return 250.0
    if 8 <= month <= 10:
        return 200.0
    return 150.0


class SeasonalCurve:
    """Month-banded curve used by the historical seeding tool.

    value = round(seasonal_base(month) * time_multiplier(hour) * U(0.8, 1.2))

    Args:
        rng: Random source for the variation factor.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()

    @staticmethod
    def time_multiplier(hour: int) -> float:
        _check_hour(hour)
        if 10 <= hour <= 14:
            return 1.5
        if 6 <= hour <= 18:
            return 1.2
        return 0.0

    def energy(self, hour: int, month: int) -> float:
        variation = 0.8 + self._rng.random() * 0.4
        return float(round(seasonal_base(month) * self.time_multiplier(hour) * variation))
