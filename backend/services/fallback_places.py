"""
Synthetic nearby places for when no real provider data is available.

Nothing here is real: every record is tagged PlaceSource.FALLBACK and each
call logs a warning so synthetic output is easy to spot in diagnostics.
"""
from __future__ import annotations

import logging
import math
import random
from typing import List, Optional

from domain.models import PlaceRecord, PlaceSource, ServiceCategory
from services.distance import destination_point, haversine_km

logger = logging.getLogger(__name__)

FALLBACK_RADIUS_KM = 5.0
PLACES_PER_CATEGORY = 4

FALLBACK_NAMES = (
    (ServiceCategory.HOSPITAL, ("General Hospital", "Medical Center", "Urgent Care", "Emergency Clinic")),
    (ServiceCategory.ATM, ("Bank ATM", "Credit Union ATM", "Cash Point", "Money Center")),
    (ServiceCategory.GROCERY, ("Supermarket", "Grocery Store", "Food Market", "Corner Store")),
    (ServiceCategory.PHARMACY, ("Pharmacy", "Drugstore", "Medical Supplies", "Health Store")),
    (ServiceCategory.GAS_STATION, ("Gas Station", "Fuel Stop", "Service Station", "Petrol Station")),
)


def _random_nearby_point(
    rng: random.Random, lat: float, lon: float, max_distance_km: float
) -> tuple:
    distance_km = rng.random() * max_distance_km
    bearing = rng.random() * 2 * math.pi
    return destination_point(lat, lon, bearing, distance_km)


def _random_phone(rng: random.Random) -> str:
    return f"+1 (555) {rng.randint(100, 999)}-{rng.randint(1000, 9999)}"


def generate_fallback_places(
    latitude: float,
    longitude: float,
    rng: Optional[random.Random] = None,
    max_distance_km: float = FALLBACK_RADIUS_KM,
) -> List[PlaceRecord]:
    """
    Build 20 synthetic places (4 per category) scattered within
    max_distance_km of the origin, sorted by distance.
    """
    rng = rng or random.Random()
    logger.warning(
        "[FALLBACK] Generating synthetic places around %.4f, %.4f (no real provider data)",
        latitude,
        longitude,
    )

    places: List[PlaceRecord] = []
    for category_index, (category, names) in enumerate(FALLBACK_NAMES):
        for i in range(PLACES_PER_CATEGORY):
            lat, lon = _random_nearby_point(rng, latitude, longitude, max_distance_km)
            places.append(
                PlaceRecord(
                    id=f"fallback_{category_index}_{i}",
                    name=f"{names[i % len(names)]} {i + 1}",
                    category=category,
                    address=f"{rng.randint(1, 9999)} Local Street, Your Area",
                    latitude=lat,
                    longitude=lon,
                    distance_km=haversine_km(latitude, longitude, lat, lon),
                    phone=None if category == ServiceCategory.ATM else _random_phone(rng),
                    rating=round(rng.uniform(3.0, 5.0), 1),
                    is_open=rng.random() < 0.8,
                    source=PlaceSource.FALLBACK,
                )
            )

    places.sort(key=lambda p: p.distance_km)
    return places


def build_test_markers(latitude: float, longitude: float) -> List[PlaceRecord]:
    """
    Three labelled debug markers right next to the origin.

    Used only when an aggregation run produced nothing at all, not even
    fallback data.
    """
    # Distances are fixed labels so the markers always list in this order.
    offsets = (
        ("test_1", "Test Grocery Store", ServiceCategory.GROCERY, 0.001, 0.001, 0.1),
        ("test_2", "Test Pharmacy", ServiceCategory.PHARMACY, -0.001, 0.001, 0.15),
        ("test_3", "Test Gas Station", ServiceCategory.GAS_STATION, 0.001, -0.001, 0.2),
    )
    return [
        PlaceRecord(
            id=place_id,
            name=name,
            category=category,
            address="Test Address",
            latitude=latitude + dlat,
            longitude=longitude + dlon,
            distance_km=distance_km,
            source=PlaceSource.TEST,
        )
        for place_id, name, category, dlat, dlon, distance_km in offsets
    ]
