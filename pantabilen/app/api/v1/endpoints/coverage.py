"""
Coverage Area API Endpoints.

Tenant admins pick the postal codes they service, one at a time or a
whole region at once.
"""

from typing import List
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from pantabilen.app.db.session import get_db
from pantabilen.app.core.guards import tenant_guard
from pantabilen.app.domain.coverage.coverage_service import CoverageService, CoverageChange
from pantabilen.app.domain.coverage.coverage_set import RegionStatus
from pantabilen.app.schemas.coverage import (
    CoverageResponse, CoverageChangeResponse, RegionStatusResponse
)
from pantabilen.app.services.audit import log_tenant_action, AuditAction

router = APIRouter(prefix="/tenants/{tenant_id}/coverage", tags=["Tenant - Coverage"])


def region_status_response(region_status: RegionStatus) -> RegionStatusResponse:
    return RegionStatusResponse(
        region=region_status.region,
        selected_count=region_status.selected_count,
        total_count=region_status.total_count,
        is_full=region_status.is_full,
        is_partial=region_status.is_partial,
        percentage=region_status.percentage,
    )


def change_response(change: CoverageChange) -> CoverageChangeResponse:
    return CoverageChangeResponse(
        added_count=len(change.added),
        removed_count=len(change.removed),
        added=change.added,
        removed=change.removed,
        batches=change.batches,
        message=change.message,
        region_status=region_status_response(change.region_status) if change.region_status else None,
    )


@router.get("", response_model=CoverageResponse)
async def get_coverage(
    tenant_id: int = Path(..., description="Tenant ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Postal code IDs the tenant currently services."""
    coverage = await CoverageService(db).load(tenant_id)
    return CoverageResponse(
        tenant_id=tenant_id,
        postal_code_ids=sorted(coverage.selected),
        total=len(coverage),
    )


@router.delete("", response_model=CoverageChangeResponse)
async def clear_coverage(
    tenant_id: int = Path(..., description="Tenant ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Remove every postal code from the tenant's coverage."""
    change = await CoverageService(db).clear(tenant_id)
    await log_tenant_action(
        db, current_user, tenant_id, AuditAction.COVERAGE_CLEARED,
        metadata={"removed_count": len(change.removed)}
    )
    return change_response(change)


@router.post("/postal-codes/{postal_code_id}/toggle", response_model=CoverageChangeResponse)
async def toggle_postal_code(
    tenant_id: int = Path(..., description="Tenant ID"),
    postal_code_id: int = Path(..., description="Postal code ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Add the postal code if absent, remove it if present."""
    change = await CoverageService(db).toggle(tenant_id, postal_code_id)
    action = AuditAction.COVERAGE_POSTAL_CODE_ADDED if change.added else AuditAction.COVERAGE_POSTAL_CODE_REMOVED
    await log_tenant_action(db, current_user, tenant_id, action, metadata={"postal_code_id": postal_code_id})
    return change_response(change)


@router.get("/regions", response_model=List[RegionStatusResponse])
async def list_region_statuses(
    tenant_id: int = Path(..., description="Tenant ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Selected/total postal codes for every region of the tenant's country."""
    statuses = await CoverageService(db).region_statuses(tenant_id)
    return [region_status_response(region_status) for region_status in statuses]


@router.post("/regions/{region}", response_model=CoverageChangeResponse, status_code=status.HTTP_200_OK)
async def select_region(
    tenant_id: int = Path(..., description="Tenant ID"),
    region: str = Path(..., description="Region name, e.g. Stockholm"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Select every postal code in a region. A fully selected region is left unchanged."""
    change = await CoverageService(db).select_region(tenant_id, region)
    if change.added:
        await log_tenant_action(
            db, current_user, tenant_id, AuditAction.COVERAGE_REGION_SELECTED,
            metadata={"region": region, "added_count": len(change.added), "batches": change.batches}
        )
    return change_response(change)


@router.delete("/regions/{region}", response_model=CoverageChangeResponse)
async def deselect_region(
    tenant_id: int = Path(..., description="Tenant ID"),
    region: str = Path(..., description="Region name, e.g. Stockholm"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Remove every postal code of a region from the coverage."""
    change = await CoverageService(db).deselect_region(tenant_id, region)
    await log_tenant_action(
        db, current_user, tenant_id, AuditAction.COVERAGE_REGION_DESELECTED,
        metadata={"region": region, "removed_count": len(change.removed)}
    )
    return change_response(change)
