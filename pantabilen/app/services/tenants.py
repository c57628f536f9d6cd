"""
Tenant lookups shared by tenant-scoped endpoints.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from pantabilen.app.core.exceptions import ResourceNotFoundError
from pantabilen.app.models.tenant import Tenant


async def get_tenant_or_404(db: AsyncSession, tenant_id: int) -> Tenant:
    """Active tenant by ID, else ResourceNotFoundError."""
    tenant = await db.get(Tenant, tenant_id)
    if tenant is None or not tenant.is_active:
        raise ResourceNotFoundError("Tenant", tenant_id)
    return tenant
