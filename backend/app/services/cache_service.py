"""Redis cache service for generated plans and weather lookups."""

import json
import logging
from typing import Any

import redis.asyncio as redis

from app.config import settings

logger = logging.getLogger(__name__)

# TTLs in seconds
TTL_WEATHER = 3 * 60 * 60         # 3 hours
TTL_LATEST = 24 * 60 * 60         # 24 hours, "latest plan" pointer


def plan_ttl() -> int:
    return settings.plan_ttl_hours * 60 * 60


class CacheService:
    """Redis-backed cache with typed TTLs."""

    def __init__(self):
        self._redis: redis.Redis | None = None

    async def _get_redis(self) -> redis.Redis | None:
        if self._redis is None:
            try:
                self._redis = redis.from_url(
                    settings.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                    socket_connect_timeout=2,
                    socket_timeout=2,
                )
                await self._redis.ping()
            except Exception as e:
                logger.warning(f"Redis unavailable, cache disabled: {e}")
                self._redis = None
                return None
        return self._redis

    async def get(self, key: str) -> Any | None:
        """Get a value from cache. Returns None on miss or error."""
        try:
            r = await self._get_redis()
            if r is None:
                return None
            raw = await r.get(key)
            if raw is None:
                return None
            return json.loads(raw)
        except Exception as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: int = TTL_WEATHER) -> bool:
        """Set a value in cache with TTL. Returns False on error."""
        try:
            r = await self._get_redis()
            if r is None:
                return False
            await r.set(key, json.dumps(value, default=str), ex=ttl)
            return True
        except Exception as e:
            logger.warning(f"Cache write failed for {key}: {e}")
            return False

    # Typed helpers

    def plan_key(self, plan_id: str) -> str:
        return f"plan:{plan_id}"

    def latest_plan_key(self) -> str:
        return "plan:latest"

    def weather_key(self, destination: str, start: str, days: int) -> str:
        return f"weather:{destination.strip().lower()}:{start}:{days}"

    async def get_plan(self, plan_id: str) -> dict | None:
        return await self.get(self.plan_key(plan_id))

    async def set_plan(self, plan_id: str, data: dict) -> bool:
        return await self.set(self.plan_key(plan_id), data, plan_ttl())

    async def get_latest_plan_id(self) -> str | None:
        return await self.get(self.latest_plan_key())

    async def set_latest_plan_id(self, plan_id: str) -> bool:
        return await self.set(self.latest_plan_key(), plan_id, TTL_LATEST)

    async def get_weather(self, destination: str, start: str, days: int) -> dict | None:
        return await self.get(self.weather_key(destination, start, days))

    async def set_weather(self, destination: str, start: str, days: int, data: dict):
        await self.set(self.weather_key(destination, start, days), data, TTL_WEATHER)

    async def close(self):
        if self._redis:
            await self._redis.aclose()
            self._redis = None


cache_service = CacheService()
