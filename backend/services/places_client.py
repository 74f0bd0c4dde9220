"""
Nearby place adapters: OpenStreetMap Overpass (free) and Google Places (keyed).

Every adapter turns one origin + radius into a list of PlaceRecord. Network
and parse failures are absorbed here and reported as an empty list so the
aggregation pipeline can carry on with whatever else it has.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import requests

from domain.models import ADDRESS_NOT_AVAILABLE, PlaceRecord, PlaceSource
from services.categories import category_from_osm_tags, category_title, normalize_category
from services.distance import haversine_km
from services.fallback_places import generate_fallback_places
from settings import Settings, settings as default_settings

OSM_AMENITY_PATTERN = "^(hospital|clinic|doctors|pharmacy|bank|atm|fuel|supermarket|convenience|grocery)$"
OSM_SHOP_PATTERN = "^(supermarket|convenience|grocery)$"
OSM_MAX_RESULTS = 50

GOOGLE_SEARCH_TYPES = ("hospital", "atm", "supermarket", "pharmacy", "gas_station")
GOOGLE_RESULTS_PER_TYPE = 10


class PlacesProvider:
    """Interface every nearby-place adapter implements."""

    provider = ""

    def fetch_nearby(self, latitude: float, longitude: float, radius_m: float) -> List[PlaceRecord]:
        raise NotImplementedError


def build_overpass_query(latitude: float, longitude: float, radius_m: float) -> str:
    """Overpass QL selecting essential amenities/shops around a point."""
    around = f"(around:{int(radius_m)},{latitude},{longitude})"
    amenity = f'["amenity"~"{OSM_AMENITY_PATTERN}"]'
    shop = f'["shop"~"{OSM_SHOP_PATTERN}"]'
    return (
        "[out:json][timeout:25];\n"
        "(\n"
        f"  node{amenity}{around};\n"
        f"  way{amenity}{around};\n"
        f"  relation{amenity}{around};\n"
        f"  node{shop}{around};\n"
        f"  way{shop}{around};\n"
        ");\n"
        "out center meta;\n"
    )


def _element_coordinates(element: Dict[str, Any]) -> Optional[tuple]:
    """Direct lat/lon, else the computed center for ways/relations."""
    lat = element.get("lat")
    lon = element.get("lon")
    if lat is None or lon is None:
        center = element.get("center") or {}
        lat = center.get("lat")
        lon = center.get("lon")
    if lat is None or lon is None:
        return None
    return float(lat), float(lon)


def _osm_address(tags: Dict[str, str]) -> str:
    if tags.get("addr:full"):
        return tags["addr:full"]
    street = f"{tags.get('addr:housenumber', '')} {tags.get('addr:street', '')}".strip()
    return street or ADDRESS_NOT_AVAILABLE


class OverpassPlacesClient(PlacesProvider):
    provider = "osm"

    def __init__(
        self,
        cfg: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
        max_results: int = OSM_MAX_RESULTS,
    ):
        self.settings = cfg or default_settings
        self.session = session or requests.Session()
        self.max_results = max_results
        self.logger = logging.getLogger(__name__)

    def parse_elements(
        self, elements: Iterable[Dict[str, Any]], latitude: float, longitude: float
    ) -> List[PlaceRecord]:
        places: List[PlaceRecord] = []
        for index, element in enumerate(elements):
            coords = _element_coordinates(element)
            if coords is None:
                continue
            lat, lon = coords
            tags = element.get("tags") or {}
            category = category_from_osm_tags(tags)
            places.append(
                PlaceRecord(
                    id=f"osm_{element.get('type', 'node')}_{element.get('id', index)}",
                    name=tags.get("name") or f"{category_title(category)} Service",
                    category=category,
                    address=_osm_address(tags),
                    latitude=lat,
                    longitude=lon,
                    distance_km=haversine_km(latitude, longitude, lat, lon),
                    phone=tags.get("phone"),
                    website=tags.get("website"),
                    source=PlaceSource.OSM,
                )
            )
        places.sort(key=lambda p: p.distance_km)
        return places[: self.max_results]

    def fetch_nearby(self, latitude: float, longitude: float, radius_m: float) -> List[PlaceRecord]:
        query = build_overpass_query(latitude, longitude, radius_m)
        try:
            resp = self.session.post(
                self.settings.OVERPASS_URL,
                data=query.encode("utf-8"),
                headers={"Content-Type": "text/plain"},
                timeout=self.settings.HTTP_TIMEOUT_SECONDS,
            )
            resp.raise_for_status()
            data = resp.json()
            places = self.parse_elements(data.get("elements") or [], latitude, longitude)
        except (requests.RequestException, ValueError, TypeError, AttributeError) as exc:
            self.logger.warning(
                "Overpass lookup failed for lat=%.6f lon=%.6f: %s", latitude, longitude, exc
            )
            return []

        self.logger.debug(
            "OverpassPlacesClient.fetch_nearby: lat=%.6f lon=%.6f radius_m=%.1f got %d results",
            latitude,
            longitude,
            radius_m,
            len(places),
        )
        return places


def dedupe_by_name_and_address(places: Iterable[PlaceRecord]) -> List[PlaceRecord]:
    """Keep the first place for every (name, address) pair."""
    seen = set()
    unique: List[PlaceRecord] = []
    for place in places:
        key = (place.name, place.address)
        if key in seen:
            continue
        seen.add(key)
        unique.append(place)
    return unique


class GooglePlacesClient(PlacesProvider):
    provider = "google"

    def __init__(
        self,
        cfg: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
        search_types: Iterable[str] = GOOGLE_SEARCH_TYPES,
        results_per_type: int = GOOGLE_RESULTS_PER_TYPE,
        fallback=generate_fallback_places,
    ):
        self.settings = cfg or default_settings
        self.session = session or requests.Session()
        self.search_types = tuple(search_types)
        self.results_per_type = results_per_type
        self.fallback = fallback
        self.logger = logging.getLogger(__name__)

    @property
    def base_url(self) -> str:
        return self.settings.PLACES_API_BASE_URL.rstrip("/")

    def _parse_result(
        self, item: Dict[str, Any], index: int, search_type: str, latitude: float, longitude: float
    ) -> PlaceRecord:
        location = item["geometry"]["location"]
        lat = float(location["lat"])
        lon = float(location["lng"])
        photos = item.get("photos") or []
        rating = item.get("rating")
        category = normalize_category(item.get("types") or [])
        return PlaceRecord(
            id=f"{search_type}_{item.get('place_id') or index}",
            name=item.get("name") or f"{category_title(category)} Service",
            category=category,
            address=item.get("vicinity") or item.get("formatted_address") or ADDRESS_NOT_AVAILABLE,
            latitude=lat,
            longitude=lon,
            distance_km=haversine_km(latitude, longitude, lat, lon),
            rating=float(rating) if rating else None,
            is_open=(item.get("opening_hours") or {}).get("open_now"),
            # Phone numbers need the Place Details API
            phone=None,
            price_level=item.get("price_level"),
            photo_reference=photos[0].get("photo_reference") if photos else None,
            source=PlaceSource.GOOGLE,
        )

    def _search_type(
        self, search_type: str, latitude: float, longitude: float, radius_m: float
    ) -> List[PlaceRecord]:
        params = {
            "location": f"{latitude},{longitude}",
            "radius": str(int(radius_m)),
            "type": search_type,
            "key": self.settings.GOOGLE_PLACES_API_KEY,
        }
        resp = self.session.get(
            f"{self.base_url}/nearbysearch/json",
            params=params,
            timeout=self.settings.HTTP_TIMEOUT_SECONDS,
        )
        resp.raise_for_status()
        data = resp.json()
        if data.get("status") != "OK" or not data.get("results"):
            self.logger.debug("Google Places type=%s status=%s", search_type, data.get("status"))
            return []
        return [
            self._parse_result(item, index, search_type, latitude, longitude)
            for index, item in enumerate(data["results"][: self.results_per_type])
        ]

    def fetch_nearby(self, latitude: float, longitude: float, radius_m: float) -> List[PlaceRecord]:
        if not self.settings.google_places_configured:
            self.logger.warning("Google Places API key not configured, using fallback data")
            return self.fallback(latitude, longitude)

        collected: List[PlaceRecord] = []
        try:
            for search_type in self.search_types:
                collected.extend(self._search_type(search_type, latitude, longitude, radius_m))
        except (requests.RequestException, ValueError, KeyError, TypeError, AttributeError) as exc:
            self.logger.warning(
                "Google Places lookup failed for lat=%.6f lon=%.6f: %s", latitude, longitude, exc
            )
            return []

        places = dedupe_by_name_and_address(collected)
        places.sort(key=lambda p: p.distance_km)
        self.logger.debug(
            "GooglePlacesClient.fetch_nearby: lat=%.6f lon=%.6f radius_m=%.1f got %d results",
            latitude,
            longitude,
            radius_m,
            len(places),
        )
        return places
