"""
Platform enumerations.

Defines roles, fuel types and driver availability.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.
    
    Roles:
        SUPER_ADMIN: Platform operator, may act on every tenant
        TENANT_ADMIN: Administers one scrapyard (tenant)
        DRIVER: Collects vehicles for one tenant
    """
    SUPER_ADMIN = "SUPER_ADMIN"
    TENANT_ADMIN = "TENANT_ADMIN"
    DRIVER = "DRIVER"


class FuelType(str, enum.Enum):
    """Fuel types with a pricing adjustment."""
    GASOLINE = "gasoline"
    ETHANOL = "ethanol"
    ELECTRIC = "electric"
    OTHER = "other"

    @classmethod
    def from_label(cls, label: str) -> "FuelType":
        """Map a free-text fuel label (e.g. 'diesel', 'Bensin') onto a priced fuel type."""
        normalized = (label or "").strip().lower()
        aliases = {
            "bensin": cls.GASOLINE,
            "petrol": cls.GASOLINE,
            "etanol": cls.ETHANOL,
            "e85": cls.ETHANOL,
            "el": cls.ELECTRIC,
        }
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError:
            return cls.OTHER


class DriverStatus(str, enum.Enum):
    """Driver availability."""
    AVAILABLE = "available"
    BUSY = "busy"
    BREAK = "break"
    OFFLINE = "offline"
