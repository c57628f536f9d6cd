"""
Pricing Schemas: distance rules, bonus offers and quotes.
"""

from pydantic import BaseModel, Field, model_validator
from datetime import date, datetime
from typing import Any, Dict, Optional, List
from pantabilen.app.models.enums import FuelType


class DistanceRuleCreate(BaseModel):
    """Schema for creating or replacing a distance rule."""
    min_distance_km: float = Field(..., description="Start of the range (inclusive)")
    max_distance_km: Optional[float] = Field(None, description="End of the range (exclusive), empty for unbounded")
    deduction_sek: int = Field(..., description="Deduction in SEK, zero or negative")


class DistanceRuleResponse(BaseModel):
    id: int
    tenant_id: int
    min_distance_km: float
    max_distance_km: Optional[float]
    deduction_sek: int
    range_label: str
    created_at: datetime
    updated_at: datetime


class BonusOfferCreate(BaseModel):
    """Schema for creating a bonus offer."""
    bonus_name: str = Field(..., min_length=1, max_length=200)
    bonus_amount_sek: int = Field(..., ge=0)
    start_date: date
    end_date: date
    conditions: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def check_window(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class BonusOfferUpdate(BaseModel):
    """Schema for updating a bonus offer."""
    bonus_name: Optional[str] = Field(None, min_length=1, max_length=200)
    bonus_amount_sek: Optional[int] = Field(None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    conditions: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def check_required_not_cleared(self):
        # Only `conditions` may be cleared with an explicit null.
        cleared = sorted(
            name for name in self.model_fields_set
            if name != "conditions" and getattr(self, name) is None
        )
        if cleared:
            raise ValueError(f"{', '.join(cleared)} cannot be null")
        if self.start_date is not None and self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class BonusOfferResponse(BaseModel):
    id: int
    tenant_id: int
    bonus_name: str
    bonus_amount_sek: int
    start_date: date
    end_date: date
    conditions: Optional[Dict[str, Any]]
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class QuoteRequest(BaseModel):
    """Vehicle facts for a price quote."""
    vehicle_year: int = Field(..., ge=1900, le=2100)
    vehicle_age_years: Optional[float] = Field(None, ge=0, description="Derived from vehicle_year when omitted")
    fuel_type: str = FuelType.GASOLINE.value
    is_dropoff: bool = False
    is_complete: bool = True
    pickup_distance_km: Optional[float] = Field(None, ge=0)
    has_engine_transmission_catalyst: bool = False
    has_battery_wheels_other: bool = False
    as_of: Optional[date] = None

    @model_validator(mode="after")
    def check_distance(self):
        if not self.is_dropoff and self.pickup_distance_km is None:
            raise ValueError("pickup_distance_km is required for pickups")
        return self


class PriceBreakdownResponse(BaseModel):
    age_bonus: int
    old_car_deduction: int
    distance_adjustment: int
    distance_rule_deduction: int
    parts_bonus: int
    fuel_adjustment: int


class QuoteResponse(BaseModel):
    tenant_id: int
    vehicle_age_years: float
    fuel_type: FuelType
    total: int
    breakdown: PriceBreakdownResponse
    matched_distance_rule_id: Optional[int] = None
    active_offers: List[BonusOfferResponse] = []
    featured_offer: Optional[BonusOfferResponse] = None
