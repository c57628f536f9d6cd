"""
Driver database models.

Drivers belong to one tenant; assignments link a driver to a pickup order.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum
from sqlalchemy.sql import func
from pantabilen.app.db.session import Base
from pantabilen.app.models.enums import DriverStatus


class Driver(Base):
    """Driver in a tenant's fleet."""
    __tablename__ = "drivers"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    full_name = Column(String(200), nullable=False)
    phone_number = Column(String(50), nullable=True)
    driver_status = Column(Enum(DriverStatus), default=DriverStatus.OFFLINE, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<Driver(id={self.id}, name='{self.full_name}', tenant={self.tenant_id})>"


class DriverAssignment(Base):
    """
    Driver assignment for a pickup order.
    
    At most one assignment per pickup order is active; reassigning
    deactivates the previous rows instead of deleting them.
    """
    __tablename__ = "driver_assignments"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    pickup_order_id = Column(Integer, ForeignKey("pickup_orders.id"), nullable=False, index=True)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=False, index=True)
    role = Column(String(50), default="primary", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    assigned_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<DriverAssignment(pickup={self.pickup_order_id}, driver={self.driver_id}, active={self.is_active})>"
