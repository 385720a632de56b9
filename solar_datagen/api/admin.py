"""
Administrative generation triggers.

POST /api/admin/generate-today-data          -> controller.run_today()
POST /api/admin/generate-historical-data     -> controller.backfill(days)
POST /api/admin/units/{serial}/regenerate    -> controller.regenerate_unit()

Each returns {"success": true, "message", counts...} on success. Failures
return a non-2xx status with {"success": false, "message", "error"}:
409 while another run is active, 503 when the unit registry is unavailable,
404 for an unknown serial, 500 otherwise. Partial per-unit failures are not
request failures; they show up in the ``errored`` count and ``failures``.

CHANGELOG:
- 2026-10-08: Initial creation

TODO:
- None
"""

import datetime as dt
import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from solar_datagen.api.deps import get_controller, get_settings, require_admin
from solar_datagen.config import DatagenSettings
from solar_datagen.errors import RegistryUnavailable, RunInProgress, UnitNotFound
from solar_datagen.services.scheduler import RunSummary, SchedulerController

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class HistoricalRequest(BaseModel):
    """Body of the historical backfill trigger."""

    days: int | None = Field(default=None, ge=1)


class RegenerateRequest(BaseModel):
    """Body of the single-unit retrigger; date defaults to today (UTC)."""

    date: dt.date | None = None


class FailureOut(BaseModel):
    unit_serial: str
    date: str
    error: str | None


class RunResponse(BaseModel):
    """Successful trigger response."""

    success: bool = True
    message: str
    units: int
    days: list[str]
    generated: int
    skipped: int
    errored: int
    records_inserted: int
    failures: list[FailureOut]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _ok(summary: RunSummary) -> RunResponse:
    data = summary.to_dict()
    data.pop("mode")
    return RunResponse(message=summary.message, **data)


def _failure(message: str, exc: Exception) -> JSONResponse:
    if isinstance(exc, RunInProgress):
        status_code = 409
    elif isinstance(exc, RegistryUnavailable):
        status_code = 503
    elif isinstance(exc, UnitNotFound):
        status_code = 404
    else:
        status_code = 500
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "error": str(exc)},
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.post("/generate-today-data", response_model=RunResponse)
async def generate_today_data(
    controller: Annotated[SchedulerController, Depends(get_controller)],
):
    """Generate today's records for every active unit."""
    logger.info("Manual data generation triggered via API")
    try:
        summary = await controller.run_today()
    except Exception as exc:
        logger.error("Manual data generation failed: %s", exc)
        return _failure("Data generation failed", exc)
    return _ok(summary)


@router.post("/generate-historical-data", response_model=RunResponse)
async def generate_historical_data(
    controller: Annotated[SchedulerController, Depends(get_controller)],
    settings: Annotated[DatagenSettings, Depends(get_settings)],
    payload: Annotated[HistoricalRequest | None, Body()] = None,
):
    """Backfill the past ``days`` days (today included) for every active unit."""
    days = (payload.days if payload else None) or settings.default_backfill_days
    logger.info("Generating historical data for %d day(s)", days)
    try:
        summary = await controller.backfill(days)
    except Exception as exc:
        logger.error("Historical data generation failed: %s", exc)
        return _failure("Historical data generation failed", exc)
    return _ok(summary)


@router.post("/units/{serial}/regenerate", response_model=RunResponse)
async def regenerate_unit(
    serial: str,
    controller: Annotated[SchedulerController, Depends(get_controller)],
    payload: Annotated[RegenerateRequest | None, Body()] = None,
):
    """Generate one day for a single unit; skipped if the day already has data."""
    day = payload.date if payload else None
    logger.info("Single-unit generation triggered for %s", serial)
    try:
        summary = await controller.regenerate_unit(serial, day)
    except Exception as exc:
        logger.error("Generation for unit %s failed: %s", serial, exc)
        return _failure(f"Data generation for unit {serial} failed", exc)
    return _ok(summary)
