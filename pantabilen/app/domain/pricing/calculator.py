"""
Pricing Calculator.

Combines the tenant's pricing settings and distance rules into a price
delta for one vehicle. The delta is added to the base valuation elsewhere;
it may be negative (a net deduction) and is never floored.

Terms, all additive, evaluated in this order:
1. Age bonus by age bracket
2. Old-car deduction (model year before 1990)
3. Distance adjustment: drop-off bonus, or fixed pickup-distance bracket
4. Tenant distance rule containing the pickup distance (pickups only)
5. Parts bonuses (both may apply)
6. Fuel adjustment
"""

import logging
from dataclasses import dataclass, asdict
from datetime import date
from typing import Any, Dict, Optional, Sequence

from pantabilen.app.core.exceptions import ValidationError
from pantabilen.app.domain.pricing.distance_rules import find_matching_rule
from pantabilen.app.domain.pricing.settings import PricingSettings
from pantabilen.app.models.enums import FuelType

logger = logging.getLogger(__name__)

OLD_CAR_YEAR_LIMIT = 1990


@dataclass(frozen=True)
class VehicleProfile:
    """Vehicle facts that influence the price."""
    vehicle_age_years: float
    vehicle_year: int
    fuel_type: FuelType = FuelType.GASOLINE
    is_dropoff: bool = False
    is_complete: bool = True
    pickup_distance_km: Optional[float] = None
    has_engine_transmission_catalyst: bool = False
    has_battery_wheels_other: bool = False


@dataclass(frozen=True)
class PriceBreakdown:
    """Named contributions and their sum (SEK)."""
    age_bonus: int
    old_car_deduction: int
    distance_adjustment: int
    distance_rule_deduction: int
    parts_bonus: int
    fuel_adjustment: int

    @property
    def total(self) -> int:
        return (
            self.age_bonus
            + self.old_car_deduction
            + self.distance_adjustment
            + self.distance_rule_deduction
            + self.parts_bonus
            + self.fuel_adjustment
        )

    def as_dict(self) -> Dict[str, int]:
        return {"total": self.total, "breakdown": asdict(self)}


def vehicle_age_from_year(vehicle_year: int, as_of: Optional[date] = None) -> int:
    """Age in whole years for a model year, never negative."""
    as_of = as_of or date.today()
    return max(0, as_of.year - vehicle_year)


def age_bonus(age_years: float, settings: PricingSettings) -> int:
    bonuses = settings.age_bonuses
    if age_years < 5:
        return bonuses.age_0_to_5
    if age_years < 10:
        return bonuses.age_5_to_10
    if age_years < 15:
        return bonuses.age_10_to_15
    if age_years < 20:
        return bonuses.age_15_to_20
    return bonuses.age_20_plus


def old_car_deduction(vehicle_year: int, settings: PricingSettings) -> int:
    if vehicle_year < OLD_CAR_YEAR_LIMIT:
        return settings.old_car_deduction.before_1990
    return 0


def pickup_bracket_adjustment(distance_km: float, settings: PricingSettings) -> int:
    adjustments = settings.distance_adjustments
    if distance_km < 20:
        return adjustments.pickup_0_to_20
    if distance_km < 50:
        return adjustments.pickup_20_to_50
    if distance_km < 75:
        return adjustments.pickup_50_to_75
    if distance_km < 100:
        return adjustments.pickup_75_to_100
    return adjustments.pickup_100_plus


def distance_adjustment(vehicle: VehicleProfile, settings: PricingSettings) -> int:
    if vehicle.is_dropoff:
        if vehicle.is_complete:
            return settings.distance_adjustments.dropoff_complete
        return settings.distance_adjustments.dropoff_incomplete
    return pickup_bracket_adjustment(vehicle.pickup_distance_km, settings)


def distance_rule_deduction(vehicle: VehicleProfile, distance_rules: Sequence[Any]) -> int:
    if vehicle.is_dropoff or not distance_rules:
        return 0
    rule = find_matching_rule(distance_rules, vehicle.pickup_distance_km)
    return rule.deduction_sek if rule is not None else 0


def parts_bonus(vehicle: VehicleProfile, settings: PricingSettings) -> int:
    bonus = 0
    if vehicle.has_engine_transmission_catalyst:
        bonus += settings.parts_bonuses.engine_transmission_catalyst
    if vehicle.has_battery_wheels_other:
        bonus += settings.parts_bonuses.battery_wheels_other
    return bonus


def fuel_adjustment(fuel_type: FuelType, settings: PricingSettings) -> int:
    return getattr(settings.fuel_adjustments, FuelType(fuel_type).value)


def compute_deduction(
    vehicle: VehicleProfile,
    settings: PricingSettings,
    distance_rules: Sequence[Any] = (),
) -> PriceBreakdown:
    """
    Compute the price delta for a vehicle.

    Args:
        vehicle: Vehicle facts
        settings: Tenant pricing settings
        distance_rules: Tenant distance rules (non-overlapping)

    Returns:
        PriceBreakdown with every contribution and the total

    Raises:
        ValidationError: negative age, or a pickup without a valid distance
    """
    if vehicle.vehicle_age_years < 0:
        raise ValidationError(
            "Fordonets ålder kan inte vara negativ",
            details={"vehicle_age_years": vehicle.vehicle_age_years},
        )
    if not vehicle.is_dropoff and (vehicle.pickup_distance_km is None or vehicle.pickup_distance_km < 0):
        raise ValidationError(
            "Hämtningsavstånd måste anges och kan inte vara negativt",
            details={"pickup_distance_km": vehicle.pickup_distance_km},
        )

    breakdown = PriceBreakdown(
        age_bonus=age_bonus(vehicle.vehicle_age_years, settings),
        old_car_deduction=old_car_deduction(vehicle.vehicle_year, settings),
        distance_adjustment=distance_adjustment(vehicle, settings),
        distance_rule_deduction=distance_rule_deduction(vehicle, distance_rules),
        parts_bonus=parts_bonus(vehicle, settings),
        fuel_adjustment=fuel_adjustment(vehicle.fuel_type, settings),
    )
    logger.debug("Computed price breakdown %s for %s", breakdown, vehicle)
    return breakdown
