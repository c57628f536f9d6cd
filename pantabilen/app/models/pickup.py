"""
Customer request and pickup order models.

A customer request is the intake record; its pickup order carries the
operational status. Both are created together in one transaction.
"""

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Enum, JSON, Text
from sqlalchemy.sql import func
from pantabilen.app.db.session import Base
from pantabilen.app.models.pickup_enums import PickupStatus


class CustomerRequest(Base):
    """Vehicle scrap request submitted by (or on behalf of) a customer."""
    __tablename__ = "customer_requests"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    
    # Owner
    owner_name = Column(String(200), nullable=False)
    contact_phone = Column(String(50), nullable=False)
    contact_email = Column(String(255), nullable=True)
    
    # Vehicle
    car_registration_number = Column(String(20), nullable=False)
    car_brand = Column(String(100), nullable=True)
    car_model = Column(String(100), nullable=True)
    car_year = Column(Integer, nullable=True)
    fuel_type = Column(String(50), nullable=True)
    
    # Location
    pickup_address = Column(String(500), nullable=False)
    postal_code = Column(String(20), nullable=True)
    pickup_distance_km = Column(Float, nullable=True)
    
    quote_amount = Column(Integer, nullable=True)
    status = Column(Enum(PickupStatus), default=PickupStatus.PENDING, nullable=False, index=True)
    
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<CustomerRequest(id={self.id}, reg='{self.car_registration_number}', status='{self.status.value}')>"


class PickupOrder(Base):
    """Scheduled collection derived from a customer request."""
    __tablename__ = "pickup_orders"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    customer_request_id = Column(Integer, ForeignKey("customer_requests.id"), nullable=False, unique=True)
    
    status = Column(Enum(PickupStatus), default=PickupStatus.SCHEDULED, nullable=False, index=True)
    scheduled_pickup_date = Column(Date, nullable=True)
    driver_notes = Column(Text, nullable=True)
    completion_photos = Column(JSON, nullable=True)
    final_price = Column(Integer, nullable=True)
    
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<PickupOrder(id={self.id}, request={self.customer_request_id}, status='{self.status.value}')>"
