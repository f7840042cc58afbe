"""
Redis caching service for calendar listings.

CACHING STRATEGY
================

What we cache:
  - Calendar listing responses (paginated, JSON-serialized)
  - Cache key pattern:
    "events:list:{caller}:{filters}"

Why the caller is part of the key:
  - Listings are filtered by the row-level policy set, so two callers asking
    the same question can legitimately get different rows (private events
    are only visible to their creator). Sharing one entry across callers
    would leak private events.

Invalidation strategy:
  - Any event write (create/update/delete) or registration write
    (register/unregister/status change) deletes every listing key, since
    registration_count is part of each listed event
  - Invalidation runs after the write commits (commit_and_invalidate). A
    listing that missed the cache before the commit could otherwise store
    the pre-write rows for a whole TTL
  - TTL-based expiry as safety net

  All listing keys share the "events:list:" prefix, so invalidation is a
  SCAN + DELETE over that prefix.

Why NOT cache single events:
  - The detail view shows live registration counts used to decide whether
    registering is still possible
"""

import json
from typing import Optional

import redis.asyncio as redis
from sqlalchemy.ext.asyncio import AsyncSession

from event_hub.core.config import get_settings
from event_hub.core.logging import get_logger
from event_hub.core.metrics import record_cache_operation

logger = get_logger(__name__)
settings = get_settings()

_redis_client: Optional[redis.Redis] = None

LIST_KEY_PREFIX = "events:list:"


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled or unreachable."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        try:
            _redis_client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )
            await _redis_client.ping()
            logger.info("redis_connected", url=settings.REDIS_URL)
        except Exception as e:
            logger.error("redis_connection_failed", error=str(e))
            _redis_client = None
            return None

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def make_event_list_key(caller: str, filters: dict) -> str:
    parts = "&".join(f"{name}={filters[name]}" for name in sorted(filters))
    return f"{LIST_KEY_PREFIX}{caller}:{parts}"


async def get_cached_events(caller: str, filters: dict) -> Optional[dict]:
    """Retrieve cached listing response for this caller and filter set."""
    client = await get_redis()
    if not client:
        return None

    key = make_event_list_key(caller, filters)
    try:
        data = await client.get(key)
        record_cache_operation("get", hit=data is not None)
        if data:
            logger.debug("cache_hit", key=key)
            return json.loads(data)
        logger.debug("cache_miss", key=key)
    except Exception as e:
        logger.error("cache_get_error", key=key, error=str(e))

    return None


async def set_cached_events(caller: str, filters: dict, data: dict) -> None:
    """Cache listing response with TTL."""
    client = await get_redis()
    if not client:
        return

    key = make_event_list_key(caller, filters)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except Exception as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_event_cache() -> None:
    """Invalidate all cached listings, for every caller."""
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"{LIST_KEY_PREFIX}*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", keys_deleted=deleted)
    except Exception as e:
        logger.error("cache_invalidation_error", error=str(e))


async def commit_and_invalidate(db: AsyncSession) -> None:
    """Commit the request transaction, then invalidate listings."""
    await db.commit()
    await invalidate_event_cache()


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for monitoring."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}
