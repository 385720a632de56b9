"""
Component wiring shared by the API process and the CLI.

Builds the record store, registry client, synthesizer, generation run,
controller and daily timer from a DatagenSettings instance. A single seeded
``random.Random`` is shared by every synthesis component when RANDOM_SEED is
set, so a run is reproducible end to end.

CHANGELOG:
- 2026-10-06: Initial creation
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine

from solar_datagen.cache.redis_client import invalidate_summary_cache
from solar_datagen.config import DatagenSettings
from solar_datagen.db.session import create_engine, create_session_factory
from solar_datagen.generation.anomalies import DEFAULT_RULES, AnomalyCatalog, load_rules
from solar_datagen.generation.curve import CurveModel
from solar_datagen.generation.synthesizer import RecordSynthesizer
from solar_datagen.services.generation import GenerationRun
from solar_datagen.services.registry import UnitRegistry
from solar_datagen.services.scheduler import DailyTimer, RunSummary, SchedulerController
from solar_datagen.services.store import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """All long-lived components of one process."""

    settings: DatagenSettings
    engine: AsyncEngine
    store: RecordStore
    registry: UnitRegistry
    catalog: AnomalyCatalog | None
    rng: random.Random
    controller: SchedulerController
    timer: DailyTimer

    async def aclose(self) -> None:
        await self.timer.stop()
        await self.engine.dispose()


def build_catalog(
    settings: DatagenSettings, rng: random.Random
) -> AnomalyCatalog | None:
    """Return the configured anomaly catalog, or None when anomalies are disabled."""
    if not settings.anomalies_enabled:
        return None
    if settings.anomaly_rules_path:
        return AnomalyCatalog(load_rules(settings.anomaly_rules_path), rng=rng)
    return AnomalyCatalog(DEFAULT_RULES, rng=rng)


def build_runtime(settings: DatagenSettings) -> Runtime:
    """Wire every component from ``settings``. Nothing is started or connected."""
    rng = (
        random.Random(settings.random_seed)
        if settings.random_seed is not None
        else random.Random()
    )
    engine = create_engine(settings.database_url)
    store = RecordStore(create_session_factory(engine), timeout_s=settings.store_timeout_s)
    registry = UnitRegistry(
        settings.registry_base_url,
        settings.registry_units_path,
        timeout_s=settings.registry_timeout_s,
    )
    catalog = build_catalog(settings, rng)
    synthesizer = RecordSynthesizer(CurveModel(rng), catalog, rng)
    generation_run = GenerationRun(
        store, synthesizer, insert_attempts=settings.insert_attempts
    )

    async def _invalidate(summary: RunSummary) -> None:
        await invalidate_summary_cache(settings.redis_url)

    controller = SchedulerController(
        registry,
        generation_run,
        max_workers=settings.max_workers,
        after_run=_invalidate,
    )
    timer = DailyTimer(controller, settings.schedule_timezone)
    logger.info(
        "Runtime ready (anomaly rules: %s)",
        len(catalog) if catalog is not None else "disabled",
    )
    return Runtime(
        settings=settings,
        engine=engine,
        store=store,
        registry=registry,
        catalog=catalog,
        rng=rng,
        controller=controller,
        timer=timer,
    )
