"""Reverse geocoding helpers: OpenStreetMap Nominatim first, Google second.

resolve_address() is the only entry point most callers need; it never raises
and always returns a display string, falling back to raw coordinates.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from typing import Any, Callable, List, Mapping, Optional, Sequence

import requests

from settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)
_session = requests.Session()
_last_request_ts: float = 0.0
_lock = threading.Lock()
_logged_ua = False

FALLBACK_UA = "NearbyEssentialsFinder/1.0"


class GeocodingError(Exception):
    """A single reverse-geocoding provider could not produce an address."""


def _redact_email(ua: str) -> str:
    if "@" not in ua:
        return ua
    return re.sub(r"\S+@\S+", "<redacted>", ua)


def nominatim_headers(cfg: Settings) -> dict[str, str]:
    """Build the descriptive client identifier headers Nominatim requires."""
    global _logged_ua
    ua = cfg.NOMINATIM_USER_AGENT or FALLBACK_UA
    if not _logged_ua:
        if cfg.NOMINATIM_USER_AGENT is None:
            logger.warning(
                "NOMINATIM_USER_AGENT not set in environment; using fallback UA. "
                "This may violate Nominatim usage policy."
            )
        logger.debug("Nominatim User-Agent: %s", _redact_email(ua))
        _logged_ua = True
    headers = {"User-Agent": ua}
    if cfg.NOMINATIM_REFERER:
        headers["Referer"] = cfg.NOMINATIM_REFERER
    return headers


def _throttled_get(
    url: str,
    *,
    params: dict[str, Any],
    headers: dict[str, str],
    timeout: float,
    min_interval: float = 1.1,
) -> requests.Response:
    """Perform a GET request with a simple global rate limit."""
    global _last_request_ts
    with _lock:
        now = time.time()
        delta = now - _last_request_ts
        if delta < min_interval:
            time.sleep(min_interval - delta)
        _last_request_ts = time.time()
    return _session.get(url, params=params, headers=headers, timeout=timeout)


def format_osm_address(data: Mapping[str, Any]) -> str:
    """
    Build a comma-joined address from Nominatim's structured components.

    Order: house number + road (or road), neighbourhood/suburb,
    city/town/village, state, country. Falls back to display_name.
    """
    address = data.get("address") or {}
    parts: List[str] = []

    if address.get("house_number") and address.get("road"):
        parts.append(f"{address['house_number']} {address['road']}")
    elif address.get("road"):
        parts.append(address["road"])

    district = address.get("neighbourhood") or address.get("suburb")
    if district:
        parts.append(district)

    city = address.get("city") or address.get("town") or address.get("village")
    if city:
        parts.append(city)

    if address.get("state"):
        parts.append(address["state"])

    if address.get("country"):
        parts.append(address["country"])

    return ", ".join(parts) if parts else str(data.get("display_name") or "")


def reverse_geocode_osm(lat: float, lon: float, cfg: Optional[Settings] = None) -> str:
    """Resolve an address via Nominatim. Raises GeocodingError on any failure."""
    cfg = cfg or default_settings
    params = {
        "format": "json",
        "lat": str(lat),
        "lon": str(lon),
        "zoom": "18",
        "addressdetails": "1",
    }
    try:
        resp = _throttled_get(
            cfg.NOMINATIM_BASE_URL,
            params=params,
            headers=nominatim_headers(cfg),
            timeout=cfg.HTTP_TIMEOUT_SECONDS,
            min_interval=cfg.NOMINATIM_MIN_INTERVAL,
        )
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as exc:
        raise GeocodingError(f"Nominatim request failed: {exc}") from exc

    if not isinstance(data, dict) or not data.get("display_name"):
        raise GeocodingError("No address found")

    formatted = format_osm_address(data)
    if not formatted:
        raise GeocodingError("No address found")
    return formatted


def reverse_geocode_google(lat: float, lon: float, cfg: Optional[Settings] = None) -> str:
    """Resolve an address via Google Geocoding. Raises GeocodingError on any failure."""
    cfg = cfg or default_settings
    if not cfg.google_geocoding_configured:
        raise GeocodingError("Google Geocoding API key not configured")

    params = {"latlng": f"{lat},{lon}", "key": cfg.GOOGLE_GEOCODING_API_KEY}
    try:
        resp = _session.get(cfg.GOOGLE_GEOCODE_URL, params=params, timeout=cfg.HTTP_TIMEOUT_SECONDS)
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as exc:
        raise GeocodingError(f"Google geocoding request failed: {exc}") from exc

    if not isinstance(data, dict):
        raise GeocodingError("Malformed Google geocoding response")
    results = data.get("results")
    if data.get("status") == "OK" and results:
        formatted = results[0].get("formatted_address")
        if formatted:
            return formatted
    raise GeocodingError("No address found")


def format_coordinates(lat: float, lon: float, accuracy_m: Optional[float] = None) -> str:
    """'12.3450, 98.7650' or, with accuracy, '12.3450, 98.7650 (±15m accuracy)'."""
    text = f"{lat:.4f}, {lon:.4f}"
    if accuracy_m is None:
        return text
    return f"{text} (±{round(accuracy_m)}m accuracy)"


GeocodeProvider = Callable[[float, float, Settings], str]
DEFAULT_PROVIDERS: Sequence[GeocodeProvider] = (reverse_geocode_osm, reverse_geocode_google)


def resolve_address(
    lat: float,
    lon: float,
    cfg: Optional[Settings] = None,
    providers: Optional[Sequence[GeocodeProvider]] = None,
) -> str:
    """
    Return a display address for (lat, lon), trying each provider in order.

    Never raises: provider failures are logged and the next one is tried,
    with the raw coordinate string as the final fallback.
    """
    cfg = cfg or default_settings
    for provider in providers if providers is not None else DEFAULT_PROVIDERS:
        name = getattr(provider, "__name__", repr(provider))
        try:
            address = provider(lat, lon, cfg)
        except GeocodingError as exc:
            logger.info("Reverse geocode via %s failed for lat=%s lon=%s: %s", name, lat, lon, exc)
            continue
        except Exception as exc:
            logger.warning(
                "Reverse geocode via %s errored for lat=%s lon=%s: %s", name, lat, lon, exc
            )
            continue
        if address:
            return address
    return format_coordinates(lat, lon)
