"""
Coverage Service (Domain Logic).

Loads a tenant's coverage into a CoverageSet, applies an operation and
persists the resulting diff. Bulk inserts/deletes are split into batches
of `coverage_batch_size` records, all inside one transaction.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from sqlalchemy import select, insert, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pantabilen.app.core.config import settings
from pantabilen.app.core.exceptions import PersistenceError, ResourceNotFoundError
from pantabilen.app.domain.coverage.coverage_set import CoverageSet, RegionStatus, batched
from pantabilen.app.models.postal_code import PostalCode, TenantCoverageArea
from pantabilen.app.models.tenant import Tenant

logger = logging.getLogger(__name__)


@dataclass
class CoverageChange:
    """Outcome of a coverage operation."""
    added: List[int] = field(default_factory=list)
    removed: List[int] = field(default_factory=list)
    batches: int = 0
    message: str = ""
    region_status: Optional[RegionStatus] = None


class CoverageService:

    def __init__(self, db: AsyncSession, batch_size: Optional[int] = None):
        self.db = db
        self.batch_size = settings.coverage_batch_size if batch_size is None else batch_size
        if self.batch_size < 1:
            raise ValueError("batch_size must be positive")

    async def _tenant(self, tenant_id: int) -> Tenant:
        tenant = await self.db.get(Tenant, tenant_id)
        if tenant is None:
            raise ResourceNotFoundError("Tenant", tenant_id)
        return tenant

    async def _selected_ids(self, tenant_id: int) -> Set[int]:
        result = await self.db.execute(
            select(TenantCoverageArea.postal_code_id).where(TenantCoverageArea.tenant_id == tenant_id)
        )
        return set(result.scalars().all())

    async def _catalog(self, country: str, region: Optional[str] = None) -> Dict[str, Set[int]]:
        query = select(PostalCode.id, PostalCode.region).where(
            PostalCode.country == country,
            PostalCode.is_active == True,
            PostalCode.region.is_not(None),
        )
        if region is not None:
            query = query.where(PostalCode.region == region)
        result = await self.db.execute(query)

        catalog: Dict[str, Set[int]] = {}
        for postal_code_id, postal_region in result.all():
            catalog.setdefault(postal_region, set()).add(postal_code_id)
        return catalog

    async def load(self, tenant_id: int, region: Optional[str] = None) -> CoverageSet:
        """Coverage set with the catalog of the tenant's country (optionally one region)."""
        tenant = await self._tenant(tenant_id)
        return CoverageSet(
            tenant_id=tenant_id,
            selected=await self._selected_ids(tenant_id),
            catalog=await self._catalog(tenant.country, region),
        )

    async def _persist(self, tenant_id: int, added: List[int], removed: List[int]) -> int:
        """Write the diff in batches and commit once. Returns the number of statements."""
        statements = 0
        try:
            for batch in batched(added, self.batch_size):
                await self.db.execute(
                    insert(TenantCoverageArea),
                    [{"tenant_id": tenant_id, "postal_code_id": postal_code_id} for postal_code_id in batch],
                )
                statements += 1
            for batch in batched(removed, self.batch_size):
                await self.db.execute(
                    delete(TenantCoverageArea).where(
                        TenantCoverageArea.tenant_id == tenant_id,
                        TenantCoverageArea.postal_code_id.in_(batch),
                    )
                )
                statements += 1
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Coverage update for tenant %s failed: %s", tenant_id, exc)
            raise PersistenceError("Fel vid uppdatering av täckningsområdet") from exc
        return statements

    async def toggle(self, tenant_id: int, postal_code_id: int) -> CoverageChange:
        """Select or deselect one postal code."""
        tenant = await self._tenant(tenant_id)
        postal_code = await self.db.get(PostalCode, postal_code_id)
        if postal_code is None or not postal_code.is_active or postal_code.country != tenant.country:
            raise ResourceNotFoundError("Postal code", postal_code_id)

        coverage = CoverageSet(tenant_id, selected=await self._selected_ids(tenant_id))
        if coverage.toggle(postal_code_id):
            change = CoverageChange(added=[postal_code_id], message="Postnumret har lagts till i ditt täckningsområde.")
        else:
            change = CoverageChange(removed=[postal_code_id], message="Postnumret har tagits bort från ditt täckningsområde.")
        change.batches = await self._persist(tenant_id, change.added, change.removed)
        return change

    async def select_region(self, tenant_id: int, region: str) -> CoverageChange:
        """Select every active postal code of a region; no-op if already fully selected."""
        coverage = await self.load(tenant_id, region)
        if not coverage.region_codes(region):
            raise ResourceNotFoundError("Region", region)

        added = coverage.select_region(region)
        if not added:
            logger.info("Region %s already fully selected for tenant %s", region, tenant_id)
            return CoverageChange(
                message=f"Alla postnummer i {region} är redan valda.",
                region_status=coverage.region_status(region),
            )

        batches = await self._persist(tenant_id, added, [])
        logger.info("Selected %d postal codes in %s for tenant %s (%d batches)", len(added), region, tenant_id, batches)
        return CoverageChange(
            added=added,
            batches=batches,
            message=f"{len(added)} postnummer i {region} har lagts till.",
            region_status=coverage.region_status(region),
        )

    async def deselect_region(self, tenant_id: int, region: str) -> CoverageChange:
        """Remove every postal code of a region from the selection."""
        coverage = await self.load(tenant_id, region)
        if not coverage.region_codes(region):
            raise ResourceNotFoundError("Region", region)

        removed = coverage.deselect_region(region)
        batches = await self._persist(tenant_id, [], removed) if removed else 0
        return CoverageChange(
            removed=removed,
            batches=batches,
            message=f"Alla postnummer i {region} har tagits bort.",
            region_status=coverage.region_status(region),
        )

    async def clear(self, tenant_id: int) -> CoverageChange:
        """Remove every selection of the tenant."""
        await self._tenant(tenant_id)
        removed = sorted(await self._selected_ids(tenant_id))
        try:
            await self.db.execute(delete(TenantCoverageArea).where(TenantCoverageArea.tenant_id == tenant_id))
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise PersistenceError("Fel vid rensning av täckningsområdet") from exc
        return CoverageChange(
            removed=removed,
            batches=1,
            message="Alla postnummer har tagits bort från täckningsområdet.",
        )

    async def region_statuses(self, tenant_id: int) -> List[RegionStatus]:
        """Selection progress for every region of the tenant's country."""
        coverage = await self.load(tenant_id)
        return coverage.all_region_statuses()
