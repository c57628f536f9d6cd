"""
Pricing settings store.

Loads and saves the per-tenant pricing settings blob. Reads go through
the cache; writes replace the whole blob and invalidate the cache.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pantabilen.app.core.exceptions import PersistenceError
from pantabilen.app.domain.pricing.settings import PricingSettings, default_pricing_settings
from pantabilen.app.models.pricing_settings import TenantPricingSettings
from pantabilen.app.services.pricing_cache import PricingSettingsCache

logger = logging.getLogger(__name__)


class PricingSettingsStore:

    def __init__(self, db: AsyncSession, cache: PricingSettingsCache):
        self.db = db
        self.cache = cache

    async def load(self, tenant_id: int) -> PricingSettings:
        """Cached settings, else stored settings, else platform defaults."""
        cached = await self.cache.get(tenant_id)
        if cached is not None:
            return cached

        row = await self.db.get(TenantPricingSettings, tenant_id)
        pricing = PricingSettings.from_blob(row.settings) if row else default_pricing_settings()
        await self.cache.set(tenant_id, pricing)
        return pricing

    async def save(self, tenant_id: int, pricing: PricingSettings, updated_by: Optional[int] = None) -> PricingSettings:
        """Persist the whole blob and drop the cached copy."""
        try:
            row = await self.db.get(TenantPricingSettings, tenant_id)
            if row is None:
                row = TenantPricingSettings(tenant_id=tenant_id, settings=pricing.to_blob(), updated_by=updated_by)
                self.db.add(row)
            else:
                row.settings = pricing.to_blob()
                row.updated_by = updated_by
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Saving pricing settings for tenant %s failed: %s", tenant_id, exc)
            raise PersistenceError("Kunde inte spara prisinställningarna") from exc

        await self.cache.invalidate(tenant_id)
        logger.info("Pricing settings saved for tenant %s", tenant_id)
        return pricing

    async def reset(self, tenant_id: int, updated_by: Optional[int] = None) -> PricingSettings:
        """Restore the platform defaults."""
        return await self.save(tenant_id, default_pricing_settings(), updated_by=updated_by)
