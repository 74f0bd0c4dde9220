from dataclasses import replace

from domain.models import PlaceSource, ServiceCategory, UserLocation
from services.essentials_list import (
    format_distance,
    format_place_line,
    render_debug_panel,
    render_essentials_list,
)


def test_format_distance_one_decimal():
    assert format_distance(0.04) == "0.0 km away"
    assert format_distance(2.36) == "2.4 km away"
    assert format_distance(12.0) == "12.0 km away"


def test_place_line_with_all_details(place_factory):
    place = replace(
        place_factory("City Hospital", 40.0, category=ServiceCategory.HOSPITAL, distance_km=0.42, address="12 Main St"),
        rating=4.5,
        is_open=True,
        phone="+1 555 0100",
    )
    assert format_place_line(place).splitlines() == [
        "🏥 City Hospital [HOSPITAL]",
        "   12 Main St",
        "   0.4 km away · ★ 4.5 · Open Now",
        "   ☎ +1 555 0100",
    ]


def test_place_line_omits_missing_details(place_factory):
    place = replace(place_factory("Fuel", 1.0, category=ServiceCategory.GAS_STATION, distance_km=3.0), is_open=False)
    lines = format_place_line(place).splitlines()
    assert lines[0].endswith("Fuel [GAS STATION]")
    assert lines[2] == "   3.0 km away · Closed"
    assert len(lines) == 3


def test_render_list_header_and_empty(place_factory):
    assert render_essentials_list([]) == "No nearby essentials found."
    text = render_essentials_list([place_factory("A", 1.0), place_factory("B", 2.0)])
    assert text.startswith("2 Nearby Essentials Found")


def test_debug_panel(place_factory):
    places = [
        place_factory("Clinic", 40.001, category=ServiceCategory.HOSPITAL, distance_km=0.1),
        place_factory("Mart 1", 40.002, category=ServiceCategory.GROCERY, distance_km=0.25, source=PlaceSource.FALLBACK),
    ]
    panel = render_debug_panel(UserLocation(40.0, -74.0), places)

    assert panel.splitlines()[0] == "Debug Info"
    assert "User Location: 40.0000, -74.0000" in panel
    assert "Total Places: 2" in panel
    assert "Synthetic Places: 1 (fallback/test data, not real)" in panel
    assert "  hospital: 1" in panel
    assert "  Clinic (hospital) - 0.1km" in panel
