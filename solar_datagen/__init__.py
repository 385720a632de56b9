"""
Synthetic telemetry service for a fleet of solar-generation units.

Synthesizes 2-hourly energy records per active unit per day, applies
configured anomaly distortions, and persists each (unit, day) at most once.
Generation is triggered by a daily timer, the admin API, or the CLI.

CHANGELOG:
- 2026-10-02: Initial creation

TODO:
- None
"""

__version__ = "0.1.0"
