"""
Pickup Intake Service (Domain Logic).

Registers a customer request, its pickup order and (optionally) the first
driver assignment as ONE transaction. If any step fails nothing is kept,
so there are never customer requests without a pickup order.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pantabilen.app.core.exceptions import AppException, PersistenceError, ResourceNotFoundError
from pantabilen.app.domain.pickups.status_service import PickupStatusService
from pantabilen.app.models.driver import DriverAssignment
from pantabilen.app.models.pickup import CustomerRequest, PickupOrder
from pantabilen.app.models.pickup_enums import PickupStatus, PickupTransition
from pantabilen.app.models.tenant import Tenant
from pantabilen.app.schemas.pickup import CustomerRequestCreate

logger = logging.getLogger(__name__)


class PickupIntakeService:

    @staticmethod
    async def create_request(
        db: AsyncSession,
        tenant_id: int,
        payload: CustomerRequestCreate,
    ) -> Tuple[CustomerRequest, PickupOrder, Optional[DriverAssignment]]:
        """
        Create request -> pickup order -> optional driver assignment atomically.

        Flow:
        1. Customer request (pending)
        2. Pickup order, request moves to scheduled
        3. Driver assignment, both move to assigned (only if driver_id given)
        4. Commit once

        Raises:
            ResourceNotFoundError / ValidationError: unknown tenant or driver
            PersistenceError: data store failure; everything is rolled back
        """
        try:
            tenant = await db.get(Tenant, tenant_id)
            if tenant is None or not tenant.is_active:
                raise ResourceNotFoundError("Tenant", tenant_id)

            request = CustomerRequest(
                tenant_id=tenant_id,
                **payload.model_dump(exclude={"driver_id", "scheduled_pickup_date"}),
                status=PickupStatus.PENDING,
            )
            db.add(request)
            await db.flush()

            pickup = PickupOrder(
                tenant_id=tenant_id,
                customer_request_id=request.id,
                status=PickupStatus.PENDING,
                scheduled_pickup_date=payload.scheduled_pickup_date,
            )
            db.add(pickup)
            await db.flush()
            await PickupStatusService.apply(db, pickup, PickupTransition.SCHEDULE)

            assignment = None
            if payload.driver_id is not None:
                assignment = await PickupStatusService.assign_driver(db, pickup, payload.driver_id)

            await db.commit()
        except AppException:
            await db.rollback()
            raise
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error("Customer request intake for tenant %s failed: %s", tenant_id, exc)
            raise PersistenceError("Kunde inte skapa förfrågan") from exc

        await db.refresh(request)
        await db.refresh(pickup)
        logger.info(
            "Created customer request %s with pickup order %s for tenant %s",
            request.id, pickup.id, tenant_id,
        )
        return request, pickup, assignment
