"""
Pricing settings value objects.

The settings are persisted as one JSON blob per tenant. Field aliases are
the bracket labels used in that blob ("0-4.99", "20-50km", "pre1990", ...)
and must not change, since stored blobs are read back through them.

Every field carries the range the admin UI allows; pydantic rejects values
outside it.
"""

from typing import Any, Dict
from pydantic import BaseModel, Field


class AgeBonuses(BaseModel):
    """Bonus by vehicle age bracket (SEK, >= 0)."""
    age_0_to_5: int = Field(10000, ge=0, le=20000, alias="0-4.99")
    age_5_to_10: int = Field(5000, ge=0, le=20000, alias="5-9.99")
    age_10_to_15: int = Field(2500, ge=0, le=20000, alias="10-14.99")
    age_15_to_20: int = Field(1000, ge=0, le=20000, alias="15-19.99")
    age_20_plus: int = Field(0, ge=0, le=20000, alias="20+")

    class Config:
        populate_by_name = True
        extra = "forbid"


class OldCarDeduction(BaseModel):
    """Flat deduction for vehicles made before 1990 (SEK, <= 0)."""
    before_1990: int = Field(-1000, ge=-5000, le=0, alias="pre1990")

    class Config:
        populate_by_name = True
        extra = "forbid"


class DistanceAdjustments(BaseModel):
    """Drop-off bonuses and fixed pickup-distance brackets."""
    dropoff_complete: int = Field(500, ge=0, le=5000, alias="dropoff_complete")
    dropoff_incomplete: int = Field(0, ge=0, le=5000, alias="dropoff_incomplete")
    pickup_0_to_20: int = Field(-250, ge=-5000, le=0, alias="0-20km")
    pickup_20_to_50: int = Field(-500, ge=-5000, le=0, alias="20-50km")
    pickup_50_to_75: int = Field(-1000, ge=-5000, le=0, alias="50-75km")
    pickup_75_to_100: int = Field(-1250, ge=-5000, le=0, alias="75-100km")
    pickup_100_plus: int = Field(-2500, ge=-5000, le=0, alias="100+km")

    class Config:
        populate_by_name = True
        extra = "forbid"


class PartsBonuses(BaseModel):
    """Bonuses for valuable parts present on the vehicle (SEK, >= 0)."""
    engine_transmission_catalyst: int = Field(1000, ge=0, le=5000, alias="engine_transmission_catalyst")
    battery_wheels_other: int = Field(500, ge=0, le=5000, alias="battery_wheels_other")

    class Config:
        populate_by_name = True
        extra = "forbid"


class FuelAdjustments(BaseModel):
    """Adjustment by fuel type. Only `other` is tenant-configurable."""
    gasoline: int = Field(0, ge=0, le=0, alias="gasoline")
    ethanol: int = Field(0, ge=0, le=0, alias="ethanol")
    electric: int = Field(0, ge=0, le=0, alias="electric")
    other: int = Field(-500, ge=-1000, le=0, alias="other")

    class Config:
        populate_by_name = True
        extra = "forbid"


class PricingSettings(BaseModel):
    """Complete pricing configuration of one tenant."""
    age_bonuses: AgeBonuses = Field(default_factory=AgeBonuses)
    old_car_deduction: OldCarDeduction = Field(default_factory=OldCarDeduction)
    distance_adjustments: DistanceAdjustments = Field(default_factory=DistanceAdjustments)
    parts_bonuses: PartsBonuses = Field(default_factory=PartsBonuses)
    fuel_adjustments: FuelAdjustments = Field(default_factory=FuelAdjustments)

    class Config:
        populate_by_name = True
        extra = "forbid"

    def to_blob(self) -> Dict[str, Dict[str, int]]:
        """Serialize to the stored JSON shape."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_blob(cls, blob: Dict[str, Any]) -> "PricingSettings":
        """Load from the stored JSON shape; missing sections fall back to defaults."""
        return cls.model_validate(blob or {})

    def with_section(self, section: str, values: Dict[str, Any]) -> "PricingSettings":
        """
        Return a copy with `values` merged into one section.

        Keys left out of `values` keep their current value. Keys may be
        given by bracket label or by field name.

        Raises:
            KeyError: if `section` is not a pricing section
            pydantic.ValidationError: if a value is outside its range
        """
        if section not in SECTION_MODELS:
            raise KeyError(section)
        model = SECTION_MODELS[section]
        labels = {name: info.alias or name for name, info in model.model_fields.items()}

        blob = self.to_blob()
        merged = dict(blob[section])
        merged.update({labels.get(key, key): value for key, value in values.items()})
        blob[section] = model.model_validate(merged).model_dump(by_alias=True)
        return PricingSettings.from_blob(blob)


SECTION_MODELS = {
    "age_bonuses": AgeBonuses,
    "old_car_deduction": OldCarDeduction,
    "distance_adjustments": DistanceAdjustments,
    "parts_bonuses": PartsBonuses,
    "fuel_adjustments": FuelAdjustments,
}


def default_pricing_settings() -> PricingSettings:
    """Platform defaults used until a tenant saves its own settings."""
    return PricingSettings()
