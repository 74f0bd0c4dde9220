"""
Core domain models for the nearby essentials finder.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional


ADDRESS_NOT_AVAILABLE = "Address not available"


class ServiceCategory(str, Enum):
    """
    Internal service categories every place is normalized into.

    Declaration order is the display order used by the list view, the
    debug panel and the fallback generator.
    """
    HOSPITAL = "hospital"
    ATM = "atm"
    GROCERY = "grocery"
    PHARMACY = "pharmacy"
    GAS_STATION = "gas_station"
    OTHER = "other"


class PlaceSource(str, Enum):
    """Where a PlaceRecord came from."""
    OSM = "osm"
    GOOGLE = "google"
    FALLBACK = "fallback"  # synthetic, generated locally
    TEST = "test"  # synthetic debug markers

    @property
    def is_synthetic(self) -> bool:
        return self in (PlaceSource.FALLBACK, PlaceSource.TEST)


@dataclass(frozen=True)
class PlaceRecord:
    """A single nearby place, normalized across providers."""
    id: str  # provider-prefixed, unique within one aggregation run
    name: str
    category: ServiceCategory
    address: str
    latitude: float
    longitude: float
    distance_km: float  # always computed from the query origin
    rating: Optional[float] = None
    is_open: Optional[bool] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    price_level: Optional[int] = None
    photo_reference: Optional[str] = None
    source: PlaceSource = PlaceSource.OSM

    @property
    def is_synthetic(self) -> bool:
        return self.source.is_synthetic


@dataclass(frozen=True)
class Query:
    """Origin + search radius driving every adapter call in one run."""
    latitude: float
    longitude: float
    radius_m: int = 5000


@dataclass(frozen=True)
class UserLocation:
    """A resolved device position."""
    latitude: float
    longitude: float
    accuracy_m: float = 0.0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class FinderState:
    """
    UI-facing result holder for the current location refresh.

    Replaced wholesale at the end of each stage; never merged with the
    previous run.
    """
    location: Optional[UserLocation] = None
    address: Optional[str] = None
    places: List[PlaceRecord] = field(default_factory=list)
    error: Optional[str] = None
    loading: bool = False
    address_loading: bool = False
