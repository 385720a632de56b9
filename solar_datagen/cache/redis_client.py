"""
Redis client for the records summary cache.

Summaries are cached under ``summary:{window}`` keys. Every cache operation
is best-effort: connection failures are logged but never propagate, so a
missing Redis only costs extra database queries.

CHANGELOG:
- 2026-10-07: Initial creation
"""

import logging

import redis.asyncio as redis

logger = logging.getLogger(__name__)

SUMMARY_KEY_PREFIX = "summary:"


def summary_key(days: int | None) -> str:
    return f"{SUMMARY_KEY_PREFIX}{days if days is not None else 'all'}"


async def get_redis(url: str) -> redis.Redis:
    """Create and return an async Redis client for ``url``."""
    return redis.from_url(url)


async def read_cached(url: str, key: str) -> str | None:
    """Return the cached value for ``key``, or None on miss or Redis failure."""
    try:
        client = await get_redis(url)
        try:
            cached = await client.get(key)
        finally:
            await client.aclose()
    except Exception:
        logger.warning("Redis read failed for key %s", key, exc_info=True)
        return None
    if cached is None:
        return None
    return cached.decode("utf-8") if isinstance(cached, bytes) else str(cached)


async def write_cached(url: str, key: str, value: str, ttl_s: int) -> None:
    """Store ``value`` under ``key`` with a TTL (best-effort)."""
    try:
        client = await get_redis(url)
        try:
            await client.set(key, value, ex=ttl_s or None)
        finally:
            await client.aclose()
    except Exception:
        logger.warning("Redis write failed for key %s", key, exc_info=True)


async def invalidate_summary_cache(url: str) -> None:
    """Delete all cached summaries (best-effort).

    Called after a generation run inserted records, since every summary
    window may include the new day.
    """
    try:
        client = await get_redis(url)
        try:
            keys = [key async for key in client.scan_iter(match=f"{SUMMARY_KEY_PREFIX}*")]
            if keys:
                await client.delete(*keys)
        finally:
            await client.aclose()
    except Exception:
        logger.warning("Failed to invalidate summary cache", exc_info=True)
