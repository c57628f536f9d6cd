"""
Audit Log Database Model.

Tracks configuration changes and pickup operations per tenant.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from pantabilen.app.db.session import Base


class AuditLog(Base):
    """
    Audit log model for tracking admin actions.
    
    Events logged:
    - DISTANCE_RULE_CREATED / UPDATED / DELETED
    - BONUS_OFFER_CREATED / UPDATED / DEACTIVATED
    - PRICING_SETTINGS_SAVED / RESET
    - COVERAGE_* changes
    - PICKUP_* operations
    """
    __tablename__ = "audit_logs"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    # Tenant the action applies to (None for platform-level actions)
    tenant_id = Column(Integer, index=True, nullable=True)
    
    # Who performed the action (None for system actions)
    actor_id = Column(Integer, index=True, nullable=True)
    actor_username = Column(String(255), nullable=True)
    
    # What action was performed
    action = Column(String(100), nullable=False, index=True)
    
    # Additional context (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)
    
    # Timestamp
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    
    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', tenant={self.tenant_id}, actor={self.actor_username})>"
