"""
FastAPI dependency injection providers.

Components live on ``app.state.runtime`` (built in the lifespan); these
providers hand them to route handlers, and tests replace them through
``app.dependency_overrides``.

CHANGELOG:
- 2026-10-08: Initial creation
"""

from fastapi import Request

from solar_datagen.config import DatagenSettings
from solar_datagen.services.scheduler import SchedulerController
from solar_datagen.services.store import RecordStore


def get_controller(request: Request) -> SchedulerController:
    return request.app.state.runtime.controller


def get_store(request: Request) -> RecordStore:
    return request.app.state.runtime.store


def get_settings(request: Request) -> DatagenSettings:
    return request.app.state.runtime.settings


async def require_admin(request: Request) -> None:
    """Enforce the admin bearer token via AdminAuth on app.state."""
    await request.app.state.auth.verify(request)
