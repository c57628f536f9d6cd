"""
Customer request, pickup and driver schemas.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional, List
from pantabilen.app.models.enums import DriverStatus
from pantabilen.app.models.pickup_enums import PickupStatus, PickupTransition


class CustomerRequestCreate(BaseModel):
    """Schema for registering a customer request together with its pickup order."""
    owner_name: str = Field(..., min_length=1, max_length=200)
    contact_phone: str = Field(..., min_length=5, max_length=50)
    contact_email: Optional[str] = Field(None, max_length=255)
    car_registration_number: str = Field(..., min_length=2, max_length=20)
    car_brand: Optional[str] = Field(None, max_length=100)
    car_model: Optional[str] = Field(None, max_length=100)
    car_year: Optional[int] = Field(None, ge=1900, le=2100)
    fuel_type: Optional[str] = Field(None, max_length=50)
    pickup_address: str = Field(..., min_length=1, max_length=500)
    postal_code: Optional[str] = Field(None, max_length=20)
    pickup_distance_km: Optional[float] = Field(None, ge=0)
    quote_amount: Optional[int] = None
    scheduled_pickup_date: Optional[date] = None
    driver_id: Optional[int] = Field(None, description="Assign a driver right away")


class CustomerRequestResponse(BaseModel):
    id: int
    tenant_id: int
    owner_name: str
    car_registration_number: str
    pickup_address: str
    status: PickupStatus
    created_at: datetime

    class Config:
        from_attributes = True


class PickupOrderResponse(BaseModel):
    id: int
    tenant_id: int
    customer_request_id: int
    status: PickupStatus
    scheduled_pickup_date: Optional[date]
    driver_notes: Optional[str]
    completion_photos: Optional[List[str]]
    assigned_driver_id: Optional[int] = None
    available_transitions: List[PickupTransition] = []

    class Config:
        from_attributes = True


class IntakeResponse(BaseModel):
    request: CustomerRequestResponse
    pickup: PickupOrderResponse


class PickupTransitionRequest(BaseModel):
    driver_notes: Optional[str] = Field(None, max_length=2000)
    completion_photos: Optional[List[str]] = None


class DriverAssignmentRequest(BaseModel):
    driver_id: int


class DriverCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    phone_number: Optional[str] = Field(None, max_length=50)
    driver_status: DriverStatus = DriverStatus.OFFLINE


class DriverResponse(BaseModel):
    id: int
    tenant_id: int
    full_name: str
    phone_number: Optional[str]
    driver_status: DriverStatus
    is_active: bool

    class Config:
        from_attributes = True
