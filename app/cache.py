import json
import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.config import settings

logger = logging.getLogger(__name__)

FEED_KEY_PREFIX = "public:feed"
POPULAR_KEY_PREFIX = "public:popular"

# Session.info key set by writes that change the public listings.
STALE_PUBLIC_FLAG = "public_listings_stale"


class CacheManager:
    """
    Cache-aside manager backed by Redis, used for the anonymous public
    listings (feed pages and the popular ranking).

    Every method is safe to call when Redis is unavailable: reads return
    None and writes are skipped, so the API keeps serving from the
    database.
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
        client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await client.ping()
        except RedisError as exc:
            logger.warning("Redis unavailable, feed cache disabled: %s", exc)
            await client.aclose()
            return
        self._redis = client
        logger.info("Redis connected: %s", settings.REDIS_URL)

    async def disconnect(self) -> None:
        """Close the connection pool.  Called once at application shutdown."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    # ------------------------------------------------------------------
    # Core cache operations
    # ------------------------------------------------------------------

    async def get(self, key: str) -> dict | list | None:
        """Return the cached value for *key*, or None on a miss or error."""
        if not self._redis:
            self._misses += 1
            return None
        try:
            data = await self._redis.get(key)
        except RedisError as exc:
            logger.debug("Cache GET error for key=%r: %s", key, exc)
            self._misses += 1
            return None
        if data is None:
            self._misses += 1
            return None
        self._hits += 1
        return json.loads(data)

    async def set(self, key: str, value: dict | list, ttl: int | None = None) -> None:
        """Store *value* under *key*; a failed write never breaks a request."""
        if not self._redis:
            return
        try:
            await self._redis.set(key, json.dumps(value, default=str), ex=ttl)
        except RedisError as exc:
            logger.debug("Cache SET error for key=%r: %s", key, exc)

    async def delete_pattern(self, pattern: str) -> None:
        """Delete all keys matching *pattern* using SCAN (avoids blocking KEYS)."""
        if not self._redis:
            return
        try:
            keys = [key async for key in self._redis.scan_iter(match=pattern)]
            if keys:
                await self._redis.delete(*keys)
                logger.debug("Cache invalidated %d key(s) matching %r", len(keys), pattern)
        except RedisError as exc:
            logger.debug("Cache DELETE_PATTERN error for pattern=%r: %s", pattern, exc)

    # ------------------------------------------------------------------
    # Domain-level helpers
    # ------------------------------------------------------------------

    @staticmethod
    def feed_key(page: int, limit: int) -> str:
        return f"{FEED_KEY_PREFIX}:{page}:{limit}"

    @staticmethod
    def popular_key(limit: int) -> str:
        return f"{POPULAR_KEY_PREFIX}:{limit}"

    async def invalidate_public(self) -> None:
        """
        Drop every cached public listing.

        Called after any write that can change what the feed shows: blog
        create/update/delete, comment create/delete, like/unlike.
        """
        await self.delete_pattern(f"{FEED_KEY_PREFIX}:*")
        await self.delete_pattern(f"{POPULAR_KEY_PREFIX}:*")

    @staticmethod
    def mark_public_stale(session) -> None:
        """Flag *session* so the public listings are dropped once it commits."""
        session.info[STALE_PUBLIC_FLAG] = True

    async def invalidate_public_if_stale(self, session) -> None:
        """Called by ``get_db`` after a successful commit."""
        if session.info.pop(STALE_PUBLIC_FLAG, False):
            await self.invalidate_public()

    @property
    def stats(self) -> dict:
        """Snapshot of hit/miss counters, reported by the health endpoint."""
        total = self._hits + self._misses
        return {
            "enabled": self._redis is not None,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }


# Module-level singleton shared across all request handlers.
cache = CacheManager()
