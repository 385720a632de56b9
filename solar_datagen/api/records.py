"""
GET /v1/records/summary: stored records grouped by UTC date.

Returns one entry per date, newest first, with the record count, total
energy and the serials that reported that day. Responses are cached in
Redis per window; generation runs that insert records invalidate the cache.

CHANGELOG:
- 2026-10-07: Initial creation
"""

import json
import logging
from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from solar_datagen.api.deps import get_controller, get_settings, get_store
from solar_datagen.cache.redis_client import read_cached, summary_key, write_cached
from solar_datagen.config import DatagenSettings
from solar_datagen.errors import StoreUnavailable
from solar_datagen.generation.synthesizer import day_start
from solar_datagen.services.scheduler import SchedulerController
from solar_datagen.services.store import RecordStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/records", tags=["records"])


@router.get("/summary")
async def records_summary(
    store: Annotated[RecordStore, Depends(get_store)],
    controller: Annotated[SchedulerController, Depends(get_controller)],
    settings: Annotated[DatagenSettings, Depends(get_settings)],
    days: Annotated[int | None, Query(ge=1)] = None,
) -> list[dict]:
    """Return per-day record groups for the last ``days`` days (all when omitted).

    Raises:
        HTTPException: 503 if the record store is unavailable.
    """
    key = summary_key(days)
    cached = await read_cached(settings.redis_url, key)
    if cached is not None:
        return json.loads(cached)

    since = None
    if days is not None:
        since = day_start(controller.today() - timedelta(days=days - 1))

    try:
        summaries = await store.summarize_days(since)
    except StoreUnavailable as exc:
        logger.error("Records summary failed: %s", exc)
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    body = [summary.to_dict() for summary in summaries]
    await write_cached(settings.redis_url, key, json.dumps(body), settings.cache_ttl_s)
    return body
