import random
from collections import Counter

import pytest

from domain.models import PlaceSource, ServiceCategory
from services.distance import haversine_km
from services.fallback_places import build_test_markers, generate_fallback_places


def test_fallback_shape():
    places = generate_fallback_places(40.0, -74.0, rng=random.Random(7))

    assert len(places) == 20
    counts = Counter(p.category for p in places)
    for category in (
        ServiceCategory.HOSPITAL,
        ServiceCategory.ATM,
        ServiceCategory.GROCERY,
        ServiceCategory.PHARMACY,
        ServiceCategory.GAS_STATION,
    ):
        assert counts[category] == 4
    assert len({p.id for p in places}) == 20


def test_fallback_values_in_range():
    places = generate_fallback_places(40.0, -74.0, rng=random.Random(42))

    for place in places:
        assert place.source == PlaceSource.FALLBACK
        assert place.is_synthetic
        assert place.id.startswith("fallback_")
        assert 3.0 <= place.rating <= 5.0
        assert isinstance(place.is_open, bool)
        assert place.address.endswith("Local Street, Your Area")
        assert place.distance_km <= 5.0 + 1e-6
        assert place.distance_km == pytest.approx(
            haversine_km(40.0, -74.0, place.latitude, place.longitude)
        )
        if place.category == ServiceCategory.ATM:
            assert place.phone is None
        else:
            assert place.phone.startswith("+1 (555) ")


def test_fallback_sorted_and_named():
    places = generate_fallback_places(10.0, 20.0, rng=random.Random(1))

    distances = [p.distance_km for p in places]
    assert distances == sorted(distances)
    names = {p.name for p in places}
    assert "General Hospital 1" in names
    assert "Petrol Station 4" in names


def test_fallback_logs_synthetic_warning(caplog):
    with caplog.at_level("WARNING"):
        generate_fallback_places(0.0, 0.0, rng=random.Random(3))
    assert any("synthetic" in r.getMessage() for r in caplog.records)


def test_test_markers_near_origin():
    markers = build_test_markers(40.0, -74.0)

    assert [m.name for m in markers] == ["Test Grocery Store", "Test Pharmacy", "Test Gas Station"]
    assert all(m.source == PlaceSource.TEST for m in markers)
    assert all(m.address == "Test Address" for m in markers)
    assert [m.distance_km for m in markers] == [0.1, 0.15, 0.2]
    assert [m.id for m in markers] == ["test_1", "test_2", "test_3"]
