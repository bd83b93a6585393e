"""
Amenity requirements and their typed lookup.

Each requestable amenity maps to one predicate over an AmenitySet.
Electricity is matched as a discriminated value: a request for 240v is
satisfied only by a 240v supply.
"""

from enum import Enum
from typing import Callable, Iterable, Optional

from space_engine.integrations.base import AmenitySet
from space_engine.models.enums import ElectricityType


class Amenity(str, Enum):
    """Amenities a search can require."""

    RUNNING_WATER = "running_water"
    ELECTRICITY = "electricity"
    ELECTRICITY_240V = "electricity_240v"
    ELECTRICITY_110V = "electricity_110v"
    GAS_SUPPLY = "gas_supply"
    SHELTER = "shelter"
    TOILET_FACILITIES = "toilet_facilities"
    WIFI = "wifi"
    CUSTOMER_SEATING = "customer_seating"
    WASTE_DISPOSAL = "waste_disposal"
    OVERNIGHT_PARKING = "overnight_parking"
    SECURITY_CCTV = "security_cctv"
    LOADING_DOCK = "loading_dock"
    REFRIGERATION_ACCESS = "refrigeration_access"


_PREDICATES: dict[Amenity, Callable[[AmenitySet], bool]] = {
    Amenity.RUNNING_WATER: lambda a: a.running_water,
    Amenity.ELECTRICITY: lambda a: a.electricity_type != ElectricityType.NONE,
    Amenity.ELECTRICITY_240V: lambda a: a.electricity_type == ElectricityType.V240,
    Amenity.ELECTRICITY_110V: lambda a: a.electricity_type == ElectricityType.V110,
    Amenity.GAS_SUPPLY: lambda a: a.gas_supply,
    Amenity.SHELTER: lambda a: a.shelter,
    Amenity.TOILET_FACILITIES: lambda a: a.toilet_facilities,
    Amenity.WIFI: lambda a: a.wifi,
    Amenity.CUSTOMER_SEATING: lambda a: a.customer_seating,
    Amenity.WASTE_DISPOSAL: lambda a: a.waste_disposal,
    Amenity.OVERNIGHT_PARKING: lambda a: a.overnight_parking,
    Amenity.SECURITY_CCTV: lambda a: a.security_cctv,
    Amenity.LOADING_DOCK: lambda a: a.loading_dock,
    Amenity.REFRIGERATION_ACCESS: lambda a: a.refrigeration_access,
}


def offers(amenities: AmenitySet, amenity: Amenity) -> bool:
    """Check whether a listing's amenities satisfy one requirement."""
    return _PREDICATES[amenity](amenities)


def satisfies_all(amenities: Optional[AmenitySet], required: Iterable[Amenity]) -> bool:
    """
    Conjunctive match over required amenities.

    An empty requirement always matches. A listing with no amenity data
    fails any non-empty requirement.
    """
    required = list(required)
    if not required:
        return True
    if amenities is None:
        return False
    return all(offers(amenities, amenity) for amenity in required)


def parse_amenities(values: Iterable[str]) -> frozenset[Amenity]:
    """
    Parse amenity names.

    Raises:
        ValueError: On an unknown amenity name
    """
    return frozenset(Amenity(value.strip().lower()) for value in values if value.strip())
