"""
Redis caching service for booking lists.

CACHING STRATEGY
================

What we cache:
  - Booking list responses for the states whose membership does not depend
    on the clock: ALL, WAITING and REJECTED.
  - Key pattern: "bookings:list:{role}:{actor_id}:{state}"

What we never cache:
  - CURRENT, PAST and FUTURE. Their membership changes as time passes with
    no write to invalidate on.
  - Single bookings and item views (the owner's last/next booking moves
    with the clock as well).

Invalidation:
  - Creating a booking or changing its status deletes every cached list of
    the booker (role=booker) and of the item's owner (role=owner).
  - Renaming an item deletes the lists of its owner and of everyone who
    booked it; renaming a user deletes their booker lists and the owner
    lists of every item they booked.
  - Invalidation runs after the request's transaction has committed, never
    before: a list read between the two must not re-cache old rows.
  - TTL as a safety net.

Redis is advisory. Any Redis error is logged and the request falls back to
the database.
"""

import json
from typing import Iterable, Optional

import redis.asyncio as redis
from sqlalchemy.ext.asyncio import AsyncSession

from lending.core.config import get_settings
from lending.core.logging import get_logger
from lending.core.metrics import record_cache_operation
from lending.services.booking_states import BookingState, Role

logger = get_logger(__name__)
settings = get_settings()

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create the Redis connection. Returns None if Redis is disabled or down."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        try:
            _redis_client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
            await _redis_client.ping()
            logger.info("redis_connected", url=settings.REDIS_URL)
        except Exception as e:
            logger.error("redis_connection_failed", error=str(e))
            _redis_client = None
            return None

    return _redis_client


async def close_redis() -> None:
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def is_cacheable(state: BookingState) -> bool:
    return not state.is_time_dependent


def booking_list_key(role: Role, actor_id: int, state: BookingState) -> str:
    return f"bookings:list:{role.value}:{actor_id}:{state.value}"


async def get_cached_bookings(role: Role, actor_id: int, state: BookingState) -> Optional[list]:
    if not is_cacheable(state):
        return None
    client = await get_redis()
    if not client:
        return None

    key = booking_list_key(role, actor_id, state)
    try:
        data = await client.get(key)
        if data is not None:
            record_cache_operation("get", "hit")
            logger.debug("cache_hit", key=key)
            return json.loads(data)
        record_cache_operation("get", "miss")
    except Exception as e:
        record_cache_operation("get", "error")
        logger.error("cache_get_error", key=key, error=str(e))

    return None


async def set_cached_bookings(role: Role, actor_id: int, state: BookingState, data: list) -> None:
    if not is_cacheable(state):
        return
    client = await get_redis()
    if not client:
        return

    key = booking_list_key(role, actor_id, state)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data))
        record_cache_operation("set", "ok")
    except Exception as e:
        record_cache_operation("set", "error")
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_booking_lists(
    booker_ids: Iterable[int] = (),
    owner_ids: Iterable[int] = (),
) -> None:
    """Drop every cached list of these bookers (role=booker) and owners (role=owner)."""
    booker_ids, owner_ids = sorted(set(booker_ids)), sorted(set(owner_ids))
    patterns = [f"bookings:list:{Role.BOOKER.value}:{actor_id}:*" for actor_id in booker_ids]
    patterns += [f"bookings:list:{Role.OWNER.value}:{actor_id}:*" for actor_id in owner_ids]
    if not patterns:
        return

    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        for pattern in patterns:
            async for key in client.scan_iter(match=pattern, count=100):
                await client.delete(key)
                deleted += 1
        record_cache_operation("invalidate", "ok")
        logger.info("cache_invalidated", booker_ids=booker_ids, owner_ids=owner_ids, keys_deleted=deleted)
    except Exception as e:
        record_cache_operation("invalidate", "error")
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
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


async def invalidate_after_commit(
    db: AsyncSession,
    booker_ids: Iterable[int] = (),
    owner_ids: Iterable[int] = (),
) -> None:
    """Commit the request's session, then drop the affected booking lists."""
    await db.commit()
    await invalidate_booking_lists(booker_ids=booker_ids, owner_ids=owner_ids)
