"""
Nearby essentials aggregation pipeline.

One aggregation run:
1. Query OSM/Overpass (free, no key)
2. Top up with Google Places when OSM returned fewer than OSM_MIN_RESULTS
3. Drop duplicates (same name, latitude within DEDUPE_LAT_TOLERANCE)
4. Sort by distance
5. Substitute labelled test markers if nothing survived
"""
from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence

from domain.models import PlaceRecord, Query, ServiceCategory
from services.fallback_places import build_test_markers
from services.places_client import GooglePlacesClient, OverpassPlacesClient, PlacesProvider
from settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

# ~111 m of latitude. Longitude is not compared; see DESIGN.md.
DEDUPE_LAT_TOLERANCE = 0.001


def dedupe_places(places: Iterable[PlaceRecord]) -> List[PlaceRecord]:
    """
    Drop records that share a name with any earlier record (kept or not) and
    sit within DEDUPE_LAT_TOLERANCE degrees of latitude. First occurrence wins.
    """
    kept: List[PlaceRecord] = []
    seen: Dict[str, List[float]] = {}
    for place in places:
        lats = seen.setdefault(place.name, [])
        duplicate = any(abs(lat - place.latitude) < DEDUPE_LAT_TOLERANCE for lat in lats)
        lats.append(place.latitude)
        if not duplicate:
            kept.append(place)
    return kept


def sort_by_distance(places: Iterable[PlaceRecord]) -> List[PlaceRecord]:
    return sorted(places, key=lambda p: p.distance_km)


class EssentialsAggregator:
    """Runs the provider chain for one origin and returns a clean result set."""

    def __init__(
        self,
        cfg: Optional[Settings] = None,
        osm_client: Optional[PlacesProvider] = None,
        google_client: Optional[PlacesProvider] = None,
    ):
        self.settings = cfg or default_settings
        self.osm_client = osm_client or OverpassPlacesClient(self.settings)
        self.google_client = google_client or GooglePlacesClient(self.settings)

    def _fetch(
        self, client: PlacesProvider, latitude: float, longitude: float, radius_m: float
    ) -> List[PlaceRecord]:
        try:
            return list(client.fetch_nearby(latitude, longitude, radius_m))
        except Exception as exc:
            logger.warning("Places provider %s raised, treating as empty: %s", client.provider, exc)
            return []

    def aggregate(
        self, latitude: float, longitude: float, radius_m: Optional[float] = None
    ) -> List[PlaceRecord]:
        radius = radius_m if radius_m is not None else self.settings.SEARCH_RADIUS_M

        places = self._fetch(self.osm_client, latitude, longitude, radius)
        logger.info("OSM returned %d places around %.4f, %.4f", len(places), latitude, longitude)

        if len(places) < self.settings.OSM_MIN_RESULTS:
            logger.info("Fewer than %d OSM results, trying Google Places", self.settings.OSM_MIN_RESULTS)
            places = places + self._fetch(self.google_client, latitude, longitude, radius)

        result = sort_by_distance(dedupe_places(places))
        if not result:
            logger.warning("No place data at all for %.4f, %.4f; using test markers", latitude, longitude)
            return sort_by_distance(build_test_markers(latitude, longitude))
        return result

    def run(self, query: Query) -> List[PlaceRecord]:
        return self.aggregate(query.latitude, query.longitude, query.radius_m)


def summarize_places(places: Sequence[PlaceRecord], preview: int = 5) -> dict:
    """Diagnostic summary: totals, per-category counts, synthetic count, nearest few."""
    counts = Counter(p.category for p in places)
    return {
        "total": len(places),
        "by_category": {
            category.value: counts[category] for category in ServiceCategory if counts[category]
        },
        "synthetic": sum(1 for p in places if p.is_synthetic),
        "preview": list(places[:preview]),
    }

