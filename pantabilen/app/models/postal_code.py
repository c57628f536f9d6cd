"""
Postal code catalog and tenant coverage models.
"""

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from pantabilen.app.db.session import Base


class PostalCode(Base):
    """Master list of postal codes, grouped by region."""
    __tablename__ = "postal_codes_master"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    postal_code = Column(String(20), nullable=False, index=True)
    city = Column(String(100), nullable=False)
    region = Column(String(100), nullable=True, index=True)
    country = Column(String(100), nullable=False, index=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    
    def __repr__(self):
        return f"<PostalCode(id={self.id}, code='{self.postal_code}', region='{self.region}')>"


class TenantCoverageArea(Base):
    """A postal code a tenant services."""
    __tablename__ = "tenant_coverage_areas"
    __table_args__ = (
        UniqueConstraint("tenant_id", "postal_code_id", name="uq_tenant_postal_code"),
    )
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    postal_code_id = Column(Integer, ForeignKey("postal_codes_master.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<TenantCoverageArea(tenant={self.tenant_id}, postal_code_id={self.postal_code_id})>"
