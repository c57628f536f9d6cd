"""
Pricing settings cache.

Keyed per tenant in Redis with a TTL. Saving or resetting a tenant's
settings invalidates its key. Redis errors are treated as cache misses so
pricing keeps working (from the database) when Redis is unavailable.
"""

import json
import logging
from typing import Optional

from fastapi import Depends
from redis.exceptions import RedisError

from pantabilen.app.core.config import settings as app_settings
from pantabilen.app.core.redis_client import get_redis
from pantabilen.app.domain.pricing.settings import PricingSettings

logger = logging.getLogger(__name__)

PRICING_CACHE_PREFIX = "pricing:settings:"


class PricingSettingsCache:
    """Explicit, injectable cache for tenant pricing settings."""

    def __init__(self, redis, ttl_seconds: Optional[int] = None):
        self.redis = redis
        self.ttl_seconds = app_settings.pricing_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        if self.ttl_seconds < 1:
            raise ValueError("ttl_seconds must be positive")

    @staticmethod
    def key(tenant_id: int) -> str:
        return f"{PRICING_CACHE_PREFIX}{tenant_id}"

    async def get(self, tenant_id: int) -> Optional[PricingSettings]:
        try:
            raw = await self.redis.get(self.key(tenant_id))
        except RedisError as exc:
            logger.warning("Pricing cache read failed for tenant %s: %s", tenant_id, exc)
            return None
        if raw is None:
            return None
        return PricingSettings.from_blob(json.loads(raw))

    async def set(self, tenant_id: int, pricing: PricingSettings) -> None:
        try:
            await self.redis.set(self.key(tenant_id), json.dumps(pricing.to_blob()), ex=self.ttl_seconds)
        except RedisError as exc:
            logger.warning("Pricing cache write failed for tenant %s: %s", tenant_id, exc)

    async def invalidate(self, tenant_id: int) -> None:
        try:
            await self.redis.delete(self.key(tenant_id))
        except RedisError as exc:
            logger.warning("Pricing cache invalidation failed for tenant %s: %s", tenant_id, exc)


async def get_pricing_cache(redis=Depends(get_redis)) -> PricingSettingsCache:
    """FastAPI dependency providing the pricing settings cache."""
    return PricingSettingsCache(redis)
