"""
Distance Rule database model.

Tenant-defined deductions by pickup distance, independent of the fixed
pricing-settings brackets.
"""

from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey
from sqlalchemy.sql import func
from pantabilen.app.db.session import Base


class DistanceRule(Base):
    """
    Distance Rule model.
    
    Covers the half-open interval [min_distance_km, max_distance_km);
    a NULL max means the rule is unbounded upwards. Rules of one tenant
    never overlap (enforced before every insert/update).
    """
    __tablename__ = "distance_rules"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    
    min_distance_km = Column(Float, nullable=False)
    max_distance_km = Column(Float, nullable=True)
    deduction_sek = Column(Integer, nullable=False)  # Zero or negative
    
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    def __repr__(self):
        return (
            f"<DistanceRule(id={self.id}, tenant={self.tenant_id}, "
            f"[{self.min_distance_km}, {self.max_distance_km}) -> {self.deduction_sek})>"
        )
