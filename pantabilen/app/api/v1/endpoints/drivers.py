"""
Driver API Endpoints.

Tenant admins register drivers for their fleet.
"""

from typing import List
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from pantabilen.app.db.session import get_db
from pantabilen.app.core.guards import tenant_guard
from pantabilen.app.models.driver import Driver
from pantabilen.app.schemas.pickup import DriverCreate, DriverResponse
from pantabilen.app.services.audit import log_tenant_action, AuditAction
from pantabilen.app.services.tenants import get_tenant_or_404

router = APIRouter(prefix="/tenants/{tenant_id}/drivers", tags=["Tenant - Drivers"])


@router.get("", response_model=List[DriverResponse])
async def list_drivers(
    tenant_id: int = Path(..., description="Tenant ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """List the tenant's active drivers."""
    await get_tenant_or_404(db, tenant_id)
    result = await db.execute(
        select(Driver)
        .where(Driver.tenant_id == tenant_id, Driver.is_active == True)
        .order_by(Driver.full_name)
    )
    return [DriverResponse.model_validate(driver) for driver in result.scalars().all()]


@router.post("", response_model=DriverResponse, status_code=status.HTTP_201_CREATED)
async def create_driver(
    driver_data: DriverCreate,
    tenant_id: int = Path(..., description="Tenant ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Register a driver."""
    await get_tenant_or_404(db, tenant_id)
    driver = Driver(tenant_id=tenant_id, is_active=True, **driver_data.model_dump())
    db.add(driver)
    await db.commit()
    await db.refresh(driver)
    
    await log_tenant_action(
        db, current_user, tenant_id, AuditAction.DRIVER_CREATED,
        metadata={"driver_id": driver.id, "full_name": driver.full_name}
    )
    return DriverResponse.model_validate(driver)
