"""
Customer Request & Pickup API Endpoints.

Request intake is atomic (request + pickup order + optional driver in one
transaction). Pickup status only changes through named transitions.
"""

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from pantabilen.app.db.session import get_db, commit_or_raise
from pantabilen.app.core.exceptions import AppException
from pantabilen.app.core.guards import tenant_guard
from pantabilen.app.domain.pickups.intake_service import PickupIntakeService
from pantabilen.app.domain.pickups.status_service import PickupStatusService
from pantabilen.app.models.pickup import PickupOrder
from pantabilen.app.models.pickup_enums import PickupTransition
from pantabilen.app.schemas.pickup import (
    CustomerRequestCreate, CustomerRequestResponse, PickupOrderResponse, IntakeResponse,
    PickupTransitionRequest, DriverAssignmentRequest
)
from pantabilen.app.services.audit import log_tenant_action, AuditAction

router = APIRouter(prefix="/tenants/{tenant_id}", tags=["Tenant - Pickups"])


async def pickup_response(db: AsyncSession, pickup: PickupOrder) -> PickupOrderResponse:
    response = PickupOrderResponse.model_validate(pickup)
    response.assigned_driver_id = await PickupStatusService.active_driver_id(db, pickup.id)
    response.available_transitions = PickupStatusService.available_transitions(pickup.status)
    return response


async def commit_and_refresh(db: AsyncSession, pickup: PickupOrder) -> None:
    """Commit a status change; on failure nothing is kept."""
    await commit_or_raise(db, "Kunde inte uppdatera upphämtningen")
    await db.refresh(pickup)


@router.post("/requests", response_model=IntakeResponse, status_code=status.HTTP_201_CREATED)
async def create_customer_request(
    request_data: CustomerRequestCreate,
    tenant_id: int = Path(..., description="Tenant ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """
    Register a customer request.
    
    Creates the request, its pickup order (scheduled) and, when
    `driver_id` is given, the driver assignment (assigned). Either all of
    it is stored or none of it.
    """
    request, pickup, assignment = await PickupIntakeService.create_request(db, tenant_id, request_data)
    
    await log_tenant_action(
        db, current_user, tenant_id, AuditAction.CUSTOMER_REQUEST_CREATED,
        metadata={
            "customer_request_id": request.id,
            "pickup_order_id": pickup.id,
            "driver_id": assignment.driver_id if assignment else None,
        }
    )
    return IntakeResponse(
        request=CustomerRequestResponse.model_validate(request),
        pickup=await pickup_response(db, pickup),
    )


@router.post("/pickups/{pickup_id}/transitions/{transition}", response_model=PickupOrderResponse)
async def transition_pickup(
    transition: PickupTransition,
    payload: PickupTransitionRequest = None,
    tenant_id: int = Path(..., description="Tenant ID"),
    pickup_id: int = Path(..., description="Pickup order ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Apply a named status transition; illegal transitions are 409."""
    payload = payload or PickupTransitionRequest()
    pickup = await PickupStatusService.get_pickup(db, tenant_id, pickup_id)
    previous = pickup.status
    
    try:
        await PickupStatusService.apply(
            db, pickup, transition,
            driver_notes=payload.driver_notes,
            completion_photos=payload.completion_photos,
        )
        if transition == PickupTransition.UNASSIGN:
            await PickupStatusService.unassign_driver(db, pickup)
    except AppException:
        await db.rollback()
        raise
    await commit_and_refresh(db, pickup)
    
    await log_tenant_action(
        db, current_user, tenant_id, AuditAction.PICKUP_STATUS_CHANGED,
        metadata={
            "pickup_order_id": pickup.id,
            "transition": transition.value,
            "from": previous.value,
            "to": pickup.status.value,
        }
    )
    return await pickup_response(db, pickup)


@router.post("/pickups/{pickup_id}/driver", response_model=PickupOrderResponse)
async def assign_driver(
    assignment_data: DriverAssignmentRequest,
    tenant_id: int = Path(..., description="Tenant ID"),
    pickup_id: int = Path(..., description="Pickup order ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Assign or reassign the pickup's driver."""
    pickup = await PickupStatusService.get_pickup(db, tenant_id, pickup_id)
    try:
        await PickupStatusService.assign_driver(db, pickup, assignment_data.driver_id)
    except AppException:
        await db.rollback()
        raise
    await commit_and_refresh(db, pickup)
    
    await log_tenant_action(
        db, current_user, tenant_id, AuditAction.DRIVER_ASSIGNED,
        metadata={"pickup_order_id": pickup.id, "driver_id": assignment_data.driver_id}
    )
    return await pickup_response(db, pickup)


@router.delete("/pickups/{pickup_id}/driver", response_model=PickupOrderResponse)
async def unassign_driver(
    tenant_id: int = Path(..., description="Tenant ID"),
    pickup_id: int = Path(..., description="Pickup order ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Remove the pickup's driver; an assigned pickup returns to scheduled."""
    pickup = await PickupStatusService.get_pickup(db, tenant_id, pickup_id)
    await PickupStatusService.unassign_driver(db, pickup)
    await commit_and_refresh(db, pickup)
    
    await log_tenant_action(
        db, current_user, tenant_id, AuditAction.DRIVER_UNASSIGNED,
        metadata={"pickup_order_id": pickup.id}
    )
    return await pickup_response(db, pickup)
