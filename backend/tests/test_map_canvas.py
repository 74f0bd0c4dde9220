from PIL import Image

import services.map_canvas as m
from domain.models import ServiceCategory, UserLocation


def test_compute_bounds_single_point_uses_minimum_range():
    bounds = m.compute_bounds(UserLocation(40.0, -74.0), [])
    assert bounds["lat_range"] == m.MIN_DEGREE_RANGE
    assert bounds["lon_range"] == m.MIN_DEGREE_RANGE


def test_project_point_corners():
    bounds = {"min_lat": 0.0, "max_lat": 1.0, "min_lon": 0.0, "max_lon": 2.0, "lat_range": 1.0, "lon_range": 2.0}
    assert m.project_point(1.0, 0.0, bounds, 200, 100, padding=10) == (10.0, 10.0)
    assert m.project_point(0.0, 2.0, bounds, 200, 100, padding=10) == (190.0, 90.0)


def test_category_colors():
    assert m.category_color(ServiceCategory.HOSPITAL) == "#ef4444"
    assert m.category_color(ServiceCategory.OTHER) == "#6b7280"


def test_draw_map_size_and_mode(place_factory):
    places = [
        place_factory("Clinic", 40.01, -74.01, category=ServiceCategory.HOSPITAL),
        place_factory("Fuel", 39.99, -73.99, category=ServiceCategory.GAS_STATION),
    ]
    img = m.draw_essentials_map(UserLocation(40.0, -74.0), places, width=320, height=240)
    assert img.size == (320, 240)
    assert img.mode == "RGB"


def test_draw_map_caps_places(monkeypatch, place_factory):
    projected = []
    original = m.project_point

    def spy(lat, lon, *args, **kwargs):
        projected.append((lat, lon))
        return original(lat, lon, *args, **kwargs)

    monkeypatch.setattr(m, "project_point", spy)
    places = [place_factory(f"P{i}", 40.0 + i * 0.001, -74.0) for i in range(30)]

    m.draw_essentials_map(UserLocation(40.0, -74.0), places, width=200, height=150)

    # 20 place markers plus the user marker
    assert len(projected) == m.MAX_MAP_PLACES + 1


def test_render_map_writes_png(tmp_path, place_factory):
    out = tmp_path / "maps" / "essentials.png"
    path = m.render_essentials_map(
        UserLocation(40.0, -74.0), [place_factory("Shop", 40.002, -74.001)], str(out), width=400, height=300
    )

    assert path == str(out.resolve())
    with Image.open(out) as img:
        assert img.format == "PNG"
        assert img.size == (400, 300)


def test_render_map_failure_returns_empty(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    # Parent "directory" is a regular file, so saving fails.
    assert m.render_essentials_map(UserLocation(0.0, 0.0), [], str(blocker / "map.png")) == ""
