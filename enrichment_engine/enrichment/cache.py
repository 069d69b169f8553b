# enrichment_engine/enrichment/cache.py
"""
Redis-backed cache for enriched profiles.

Entries are the camelCase JSON document written with SETEX and expire
passively after the TTL; there is no invalidation API. Every failure
(no client, connection or timeout errors, undecodable values) reads as a
miss or skips the write.
"""

import asyncio
import logging
from typing import Optional

import redis.asyncio as aioredis
from pydantic import ValidationError
from redis.exceptions import RedisError

from enrichment_engine.core.exceptions import CacheError
from enrichment_engine.core.telemetry import EnrichmentEvent, Telemetry
from enrichment_engine.enrichment.schemas import EnrichedProfile

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60
DEFAULT_KEY_PREFIX = "profile_enrichment:"


def create_redis_client(url: str) -> aioredis.Redis:
    """Build a redis.asyncio client. The connection is opened on first use."""
    return aioredis.from_url(url, encoding="utf-8", decode_responses=True)


class ProfileCache:
    """
    Cache-aside store for EnrichedProfile documents.

    Usage:
        cache = ProfileCache(create_redis_client(settings.REDIS_URL))
        profile = await cache.get("cust_42")
        await cache.set("cust_42", profile)
    """

    def __init__(
        self,
        redis_client: Optional[aioredis.Redis] = None,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        telemetry: Optional[Telemetry] = None,
    ):
        self.redis_client = redis_client
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix
        self.telemetry = telemetry or Telemetry()

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def _report(self, error: CacheError, key: str) -> None:
        logger.warning(f"{error.message} for {self._key(key)}")
        self.telemetry.emit(
            EnrichmentEvent.CACHE_ERROR,
            operation=error.operation,
            cache_key=key,
            error=error.message,
        )

    async def get(self, key: str) -> Optional[EnrichedProfile]:
        """Cached profile, or None on a miss or any cache failure."""
        if self.redis_client is None:
            return None

        try:
            cached = await self.redis_client.get(self._key(key))
        except (RedisError, OSError, asyncio.TimeoutError) as e:
            self._report(CacheError("read", f"Cache read error: {e}"), key)
            return None

        if cached is None:
            return None

        try:
            return EnrichedProfile.model_validate_json(cached)
        except ValidationError as e:
            self._report(
                CacheError("decode", f"Discarding undecodable cache entry ({e.error_count()} errors)"),
                key,
            )
            return None

    async def set(
        self,
        key: str,
        profile: EnrichedProfile,
        ttl_seconds: Optional[int] = None,
    ) -> bool:
        """Write a profile with expiry. Returns False when the write was skipped."""
        if self.redis_client is None:
            return False

        try:
            await self.redis_client.setex(
                self._key(key),
                ttl_seconds or self.ttl_seconds,
                profile.to_json(),
            )
        except (RedisError, OSError, asyncio.TimeoutError) as e:
            self._report(CacheError("write", f"Cache write error: {e}"), key)
            return False

        logger.debug(f"Cached profile for {self._key(key)}")
        return True

    async def close(self) -> None:
        if self.redis_client is not None:
            await self.redis_client.aclose()
