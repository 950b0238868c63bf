import json
import logging
from typing import Any, Awaitable, Callable

import redis.asyncio as redis

from blog_api.config import settings

logger = logging.getLogger(__name__)

# Rendered in list keys for filters the caller did not set, so that
# "no filter" never collides with any concrete filter value.
UNSET = "any"

POSTS_LIST_PATTERN = "posts:list:*"


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def post_key(post_id: int) -> str:
    """Single-post key: ``post:<id>``."""
    return f"post:{post_id}"


def posts_list_key(
    page: int,
    limit: int,
    published: bool | None = None,
    author_id: int | None = None,
) -> str:
    """
    List key for one page of posts.

    Parameter order is fixed: page, limit, published, author.  ``published``
    is rendered as ``true``/``false``; unset filters become ``UNSET``.
    """
    if published is None:
        published_part = UNSET
    else:
        published_part = "true" if published else "false"
    author_part = UNSET if author_id is None else str(author_id)
    return (
        f"posts:list:page:{page}:limit:{limit}"
        f":published:{published_part}:author:{author_part}"
    )


class CacheManager:
    """
    Cache-aside manager backed by Redis.

    All public methods are safe to call even when Redis is unavailable:
    read operations behave as misses and write/delete operations are
    skipped, so a cache outage only costs latency.  The client is built
    with short socket timeouts so a stalled Redis surfaces as an error
    (and therefore a miss) instead of hanging the request.
    """

    def __init__(self) -> None:
        self._redis: redis.Redis | None = None
        self._hits: int = 0
        self._misses: int = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the connection pool.  Called once at application startup."""
        self._redis = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        # Ping to surface mis-configuration early (non-fatal).
        try:
            await self._redis.ping()
            logger.info("Redis connected: %s", settings.REDIS_URL)
        except Exception as exc:  # pragma: no cover
            logger.warning("Redis ping failed, serving from the database only: %s", exc)

    async def disconnect(self) -> None:
        """Close the connection pool.  Called once at application shutdown."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    # ------------------------------------------------------------------
    # Core cache operations
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """Return the cached value for *key*, or None on a miss / error."""
        if not self._redis:
            self._misses += 1
            return None
        try:
            data = await self._redis.get(key)
        except Exception as exc:
            logger.debug("Cache GET error for key=%r: %s", key, exc)
            self._misses += 1
            return None
        if data is None:
            self._misses += 1
            return None
        try:
            value = json.loads(data)
        except ValueError as exc:
            logger.debug("Cache entry for key=%r is not valid JSON: %s", key, exc)
            self._misses += 1
            return None
        if value is None:
            # A stored null cannot be told apart from a miss by callers.
            self._misses += 1
            return None
        self._hits += 1
        return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """
        Persist *value* under *key* with an optional TTL (seconds).

        Serialisation errors and Redis failures are logged, never raised.
        """
        if not self._redis:
            return
        try:
            serialised = json.dumps(value, default=str)
            await self._redis.set(key, serialised, ex=ttl)
        except Exception as exc:
            logger.debug("Cache SET error for key=%r: %s", key, exc)

    async def read_through(
        self,
        key: str,
        ttl: int,
        loader: Callable[[], Awaitable[Any]],
    ) -> Any:
        """
        Return the value for *key*, loading and caching it on a miss.

        *loader* is only awaited on a miss (or a cache error).  Whatever it
        raises propagates unchanged and nothing is written to the cache.
        """
        cached = await self.get(key)
        if cached is not None:
            return cached
        value = await loader()
        await self.set(key, value, ttl=ttl)
        return value

    async def delete(self, *keys: str) -> None:
        """Delete the exact *keys*."""
        if not self._redis or not keys:
            return
        try:
            await self._redis.delete(*keys)
        except Exception as exc:
            logger.debug("Cache DELETE error for keys=%r: %s", keys, exc)

    async def delete_pattern(self, pattern: str) -> None:
        """
        Delete all keys matching *pattern* using SCAN (avoids blocking KEYS).
        """
        if not self._redis:
            return
        try:
            keys: list[str] = []
            async for key in self._redis.scan_iter(match=pattern):
                keys.append(key)
            if keys:
                await self._redis.delete(*keys)
                logger.debug("Cache invalidated %d key(s) matching %r", len(keys), pattern)
        except Exception as exc:
            logger.debug("Cache DELETE_PATTERN error for pattern=%r: %s", pattern, exc)

    # ------------------------------------------------------------------
    # Domain-level invalidation helpers
    # ------------------------------------------------------------------

    async def invalidate_post(self, post_id: int | None = None) -> None:
        """
        Invalidate post caches after a write.

        Every list page is dropped: list keys are parameterised by filters
        and any write can change any page.  When *post_id* is given its
        detail entry is dropped as well.
        """
        await self.delete_pattern(POSTS_LIST_PATTERN)
        if post_id is not None:
            await self.delete(post_key(post_id))

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    @property
    def stats(self) -> dict:
        """Return a snapshot of hit/miss counters."""
        total = self._hits + self._misses
        return {
            "connected": self._redis is not None,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }


# Module-level singleton shared across all request handlers.
cache = CacheManager()
