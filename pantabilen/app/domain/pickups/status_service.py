"""
Pickup Status Service (Domain Logic).

Owns the pickup order state machine. Every status change goes through a
named PickupTransition; the pickup order is the source of truth and its
customer request mirrors the status.

    pending -> scheduled -> assigned -> in_progress -> completed
                   ^            |
                   +- unassign -+
    cancelled / rejected -> scheduled (reschedule)

Methods flush but never commit; the caller owns the transaction.
"""

import logging
from typing import Dict, FrozenSet, List, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pantabilen.app.core.exceptions import (
    InvalidStatusTransitionError, ResourceNotFoundError, ValidationError
)
from pantabilen.app.models.driver import Driver, DriverAssignment
from pantabilen.app.models.pickup import CustomerRequest, PickupOrder
from pantabilen.app.models.pickup_enums import PickupStatus, PickupTransition

logger = logging.getLogger(__name__)

S = PickupStatus

TRANSITIONS: Dict[PickupTransition, Tuple[FrozenSet[PickupStatus], PickupStatus]] = {
    PickupTransition.SCHEDULE: (frozenset({S.PENDING}), S.SCHEDULED),
    PickupTransition.ASSIGN: (frozenset({S.SCHEDULED}), S.ASSIGNED),
    PickupTransition.UNASSIGN: (frozenset({S.ASSIGNED}), S.SCHEDULED),
    PickupTransition.START: (frozenset({S.ASSIGNED}), S.IN_PROGRESS),
    PickupTransition.COMPLETE: (frozenset({S.IN_PROGRESS}), S.COMPLETED),
    PickupTransition.CANCEL: (frozenset({S.PENDING, S.SCHEDULED, S.ASSIGNED, S.IN_PROGRESS}), S.CANCELLED),
    PickupTransition.REJECT: (frozenset({S.ASSIGNED}), S.REJECTED),
    PickupTransition.RESCHEDULE: (frozenset({S.CANCELLED, S.REJECTED}), S.SCHEDULED),
}


class PickupStatusService:

    @staticmethod
    def target_status(current: PickupStatus, transition: PickupTransition) -> PickupStatus:
        """
        Resolve the status a transition leads to.

        Raises:
            InvalidStatusTransitionError: if `transition` is not allowed from `current`
        """
        allowed_from, target = TRANSITIONS[PickupTransition(transition)]
        if PickupStatus(current) not in allowed_from:
            raise InvalidStatusTransitionError(PickupStatus(current).value, PickupTransition(transition).value)
        return target

    @staticmethod
    def available_transitions(current: PickupStatus) -> List[PickupTransition]:
        return [t for t, (allowed_from, _) in TRANSITIONS.items() if PickupStatus(current) in allowed_from]

    @staticmethod
    async def get_pickup(db: AsyncSession, tenant_id: int, pickup_order_id: int) -> PickupOrder:
        result = await db.execute(
            select(PickupOrder).where(
                PickupOrder.id == pickup_order_id,
                PickupOrder.tenant_id == tenant_id,
            )
        )
        pickup = result.scalar_one_or_none()
        if pickup is None:
            raise ResourceNotFoundError("Pickup order", pickup_order_id)
        return pickup

    @staticmethod
    async def apply(
        db: AsyncSession,
        pickup: PickupOrder,
        transition: PickupTransition,
        driver_notes: Optional[str] = None,
        completion_photos: Optional[List[str]] = None,
    ) -> PickupOrder:
        """Move a pickup order through `transition` and mirror onto its customer request."""
        previous = pickup.status
        pickup.status = PickupStatusService.target_status(previous, transition)
        if driver_notes is not None:
            pickup.driver_notes = driver_notes
        if completion_photos is not None:
            pickup.completion_photos = completion_photos

        request = await db.get(CustomerRequest, pickup.customer_request_id)
        if request is not None:
            request.status = pickup.status

        await db.flush()
        logger.info(
            "Pickup %s: %s -> %s (%s)",
            pickup.id, PickupStatus(previous).value, pickup.status.value, PickupTransition(transition).value,
        )
        return pickup

    @staticmethod
    async def get_tenant_driver(db: AsyncSession, tenant_id: int, driver_id: int) -> Driver:
        driver = await db.get(Driver, driver_id)
        if driver is None or driver.tenant_id != tenant_id:
            raise ResourceNotFoundError("Driver", driver_id)
        if not driver.is_active:
            raise ValidationError("Föraren är inte aktiv", details={"driver_id": driver_id})
        return driver

    @staticmethod
    async def _deactivate_assignments(db: AsyncSession, pickup_order_id: int) -> None:
        await db.execute(
            update(DriverAssignment)
            .where(
                DriverAssignment.pickup_order_id == pickup_order_id,
                DriverAssignment.is_active == True,
            )
            .values(is_active=False)
        )

    @staticmethod
    async def assign_driver(db: AsyncSession, pickup: PickupOrder, driver_id: int) -> DriverAssignment:
        """
        Assign (or reassign) a driver.

        Previous assignments are deactivated. A scheduled pickup moves to
        assigned; an already assigned one keeps its status; a cancelled one
        gets the assignment without a status change.
        """
        await PickupStatusService.get_tenant_driver(db, pickup.tenant_id, driver_id)

        if pickup.status not in (S.SCHEDULED, S.ASSIGNED, S.CANCELLED):
            raise InvalidStatusTransitionError(pickup.status.value, PickupTransition.ASSIGN.value)

        await PickupStatusService._deactivate_assignments(db, pickup.id)
        assignment = DriverAssignment(pickup_order_id=pickup.id, driver_id=driver_id, is_active=True)
        db.add(assignment)

        if pickup.status == S.SCHEDULED:
            await PickupStatusService.apply(
                db, pickup, PickupTransition.ASSIGN, driver_notes="Driver assigned via admin"
            )
        else:
            await db.flush()
        return assignment

    @staticmethod
    async def unassign_driver(db: AsyncSession, pickup: PickupOrder) -> PickupOrder:
        """Deactivate assignments; an assigned pickup returns to scheduled."""
        await PickupStatusService._deactivate_assignments(db, pickup.id)
        if pickup.status == S.ASSIGNED:
            await PickupStatusService.apply(
                db, pickup, PickupTransition.UNASSIGN,
                driver_notes="Driver unassigned - available for self-assignment",
            )
        else:
            await db.flush()
        return pickup

    @staticmethod
    async def active_driver_id(db: AsyncSession, pickup_order_id: int) -> Optional[int]:
        result = await db.execute(
            select(DriverAssignment.driver_id).where(
                DriverAssignment.pickup_order_id == pickup_order_id,
                DriverAssignment.is_active == True,
            )
        )
        return result.scalars().first()
