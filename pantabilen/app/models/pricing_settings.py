"""
Tenant pricing settings database model.

Stores the whole pricing-settings blob as JSON, one row per tenant.
"""

from sqlalchemy import Column, Integer, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from pantabilen.app.db.session import Base


class TenantPricingSettings(Base):
    """Pricing settings blob keyed by tenant."""
    __tablename__ = "tenant_pricing_settings"
    
    tenant_id = Column(Integer, ForeignKey("tenants.id"), primary_key=True)
    settings = Column(JSON, nullable=False)
    updated_by = Column(Integer, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<TenantPricingSettings(tenant_id={self.tenant_id})>"
