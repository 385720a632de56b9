"""
Pure synthesis components: curve models, anomaly catalog, day synthesizer.

Nothing in this package performs I/O. Every component takes an injectable
``random.Random`` so a seeded source reproduces a day exactly.

CHANGELOG:
- 2026-10-02: Initial creation
"""

from solar_datagen.generation.anomalies import AnomalyCatalog, AnomalyKind, AnomalyRule
from solar_datagen.generation.curve import CurveModel, SeasonalCurve
from solar_datagen.generation.synthesizer import RecordSynthesizer, SynthesizedDay

__all__ = [
    "AnomalyCatalog",
    "AnomalyKind",
    "AnomalyRule",
    "CurveModel",
    "RecordSynthesizer",
    "SeasonalCurve",
    "SynthesizedDay",
]
