"""
FastAPI application entry point for the solar data generation service.

The lifespan loads DatagenSettings, wires the runtime (store, registry,
synthesizer, controller, daily timer), starts the timer when enabled, and
tears everything down on shutdown. Admin auth is built from ADMIN_TOKEN.

CHANGELOG:
- 2026-10-08: Register admin, records and health routers
- 2026-10-06: Initial creation
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from solar_datagen import __version__
from solar_datagen.api.admin import router as admin_router
from solar_datagen.api.health import router as health_router
from solar_datagen.api.records import router as records_router
from solar_datagen.auth.bearer import AdminAuth
from solar_datagen.config import DatagenSettings
from solar_datagen.logging_config import log_config_summary
from solar_datagen.runtime import build_runtime

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: wire components, start and stop the daily timer."""
    settings = DatagenSettings()
    log_config_summary(settings)

    runtime = build_runtime(settings)
    app.state.runtime = runtime
    app.state.auth = AdminAuth(settings.admin_token)
    if not app.state.auth.enabled:
        logger.warning("ADMIN_TOKEN not set; admin routes are unauthenticated")

    if settings.scheduler_enabled:
        runtime.timer.start()

    logger.info("Solar datagen API ready")
    try:
        yield
    finally:
        logger.info("Solar datagen API shutting down")
        await runtime.aclose()


app = FastAPI(
    title="Solar Data Generation API",
    description="Synthetic telemetry generation for solar-generation units.",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(admin_router)
app.include_router(records_router)


@app.get("/")
async def root() -> dict:
    """Root health check endpoint."""
    return {"status": "ok"}
