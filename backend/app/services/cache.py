"""
Caching Service.

Thin JSON cache over Redis for cheap-to-rebuild lookups.
Redis errors never fail a request: reads miss, writes are skipped.
"""

import json
import logging
from typing import Any, Optional

from backend.app.core import redis_client as redis_module

logger = logging.getLogger("dispatch.cache")

FILTER_OPTIONS_KEY = "orders:filter-options"


class CacheService:

    @staticmethod
    async def get(key: str) -> Optional[Any]:
        try:
            raw = await redis_module.redis_client.get(key)
        except Exception as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None
        return json.loads(raw)

    @staticmethod
    async def set(key: str, data: Any, ttl_seconds: int = 300) -> None:
        try:
            await redis_module.redis_client.set(key, json.dumps(data), ex=ttl_seconds)
        except Exception as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)

    @staticmethod
    async def invalidate(key: str) -> None:
        try:
            await redis_module.redis_client.delete(key)
        except Exception as exc:
            logger.warning("Cache invalidation failed for %s: %s", key, exc)
