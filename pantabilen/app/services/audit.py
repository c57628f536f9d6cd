"""
Audit logging service for tracking admin actions.

Provides centralized logging of configuration changes per tenant.
"""

from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from pantabilen.app.models.audit_log import AuditLog


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    TENANT_CREATED = "TENANT_CREATED"
    
    # Distance rules
    DISTANCE_RULE_CREATED = "DISTANCE_RULE_CREATED"
    DISTANCE_RULE_UPDATED = "DISTANCE_RULE_UPDATED"
    DISTANCE_RULE_DELETED = "DISTANCE_RULE_DELETED"
    
    # Bonus offers
    BONUS_OFFER_CREATED = "BONUS_OFFER_CREATED"
    BONUS_OFFER_UPDATED = "BONUS_OFFER_UPDATED"
    BONUS_OFFER_DEACTIVATED = "BONUS_OFFER_DEACTIVATED"
    
    # Pricing settings
    PRICING_SETTINGS_SAVED = "PRICING_SETTINGS_SAVED"
    PRICING_SETTINGS_RESET = "PRICING_SETTINGS_RESET"
    
    # Coverage
    COVERAGE_POSTAL_CODE_ADDED = "COVERAGE_POSTAL_CODE_ADDED"
    COVERAGE_POSTAL_CODE_REMOVED = "COVERAGE_POSTAL_CODE_REMOVED"
    COVERAGE_REGION_SELECTED = "COVERAGE_REGION_SELECTED"
    COVERAGE_REGION_DESELECTED = "COVERAGE_REGION_DESELECTED"
    COVERAGE_CLEARED = "COVERAGE_CLEARED"
    
    # Drivers and pickups
    DRIVER_CREATED = "DRIVER_CREATED"
    CUSTOMER_REQUEST_CREATED = "CUSTOMER_REQUEST_CREATED"
    PICKUP_STATUS_CHANGED = "PICKUP_STATUS_CHANGED"
    DRIVER_ASSIGNED = "DRIVER_ASSIGNED"
    DRIVER_UNASSIGNED = "DRIVER_UNASSIGNED"


async def log_event(
    db: AsyncSession,
    action: str,
    tenant_id: Optional[int] = None,
    actor_id: Optional[int] = None,
    actor_username: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """
    Log an admin event to the audit log.
    
    Args:
        db: Database session
        action: Action being performed (use AuditAction constants)
        tenant_id: Tenant the action applies to
        actor_id: ID of user performing the action
        actor_username: Username of actor
        metadata: Additional context as JSON
        
    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        tenant_id=tenant_id,
        actor_id=actor_id,
        actor_username=actor_username,
        action=action,
        meta_data=metadata,
    )
    
    db.add(audit_log)
    await db.commit()
    await db.refresh(audit_log)
    
    return audit_log


async def log_tenant_action(
    db: AsyncSession,
    current_user: dict,
    tenant_id: int,
    action: str,
    metadata: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """Log an action taken by the authenticated user on a tenant."""
    return await log_event(
        db=db,
        action=action,
        tenant_id=tenant_id,
        actor_id=current_user.get("user_id"),
        actor_username=current_user.get("sub"),
        metadata=metadata
    )


async def get_audit_trail(
    db: AsyncSession,
    tenant_id: Optional[int] = None,
    action: Optional[str] = None,
    limit: int = 100
) -> list[AuditLog]:
    """
    Retrieve audit trail with optional filtering.
    
    Returns:
        List of AuditLog instances, most recent first
    """
    query = select(AuditLog).order_by(desc(AuditLog.timestamp), desc(AuditLog.id))
    
    if tenant_id:
        query = query.where(AuditLog.tenant_id == tenant_id)
    
    if action:
        query = query.where(AuditLog.action == action)
    
    query = query.limit(limit)
    
    result = await db.execute(query)
    return result.scalars().all()
