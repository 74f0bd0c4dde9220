import sys
from pathlib import Path

import pytest

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from domain.models import PlaceRecord, PlaceSource, ServiceCategory  # noqa: E402
from settings import Settings  # noqa: E402


@pytest.fixture
def cfg(monkeypatch):
    """Settings with no provider keys and no Nominatim throttling."""
    for key in ("GOOGLE_PLACES_API_KEY", "GOOGLE_GEOCODING_API_KEY", "NOMINATIM_USER_AGENT"):
        monkeypatch.delenv(key, raising=False)
    settings = Settings()
    settings.NOMINATIM_MIN_INTERVAL = 0.0
    settings.NOMINATIM_USER_AGENT = "nearby-essentials-tests/1.0"
    return settings


def make_place(
    name,
    lat,
    lon=0.0,
    distance_km=1.0,
    category=ServiceCategory.OTHER,
    place_id=None,
    source=PlaceSource.OSM,
    address="Somewhere",
):
    return PlaceRecord(
        id=place_id or f"{source.value}_{name}_{lat}",
        name=name,
        category=category,
        address=address,
        latitude=lat,
        longitude=lon,
        distance_km=distance_km,
        source=source,
    )


@pytest.fixture
def place_factory():
    return make_place
