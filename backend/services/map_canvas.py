"""
Schematic essentials map renderer using Pillow.

Draws the user's position and nearby places on a plain grid (no tiles):
bounds come from the points themselves, markers are coloured by category.
Drawing happens at UPSCALE_FACTOR and is downsampled for smooth edges.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from domain.models import PlaceRecord, ServiceCategory, UserLocation

logger = logging.getLogger(__name__)

UPSCALE_FACTOR = 2
MAX_MAP_PLACES = 20

GRID_SPACING_PX = 40
GRID_COLOR = "#e5e7eb"
BACKGROUND_COLOR = "#ffffff"
MAP_PADDING_PX = 40
MIN_DEGREE_RANGE = 0.01

PLACE_MARKER_RADIUS = 15
PLACE_MARKER_OUTLINE = 4
USER_HALO_RADIUS = 16
USER_MARKER_RADIUS = 10
USER_MARKER_OUTLINE = 3
USER_COLOR = "#3b82f6"
USER_HALO_COLOR = (59, 130, 246, 77)
LABEL_COLOR = "#374151"
INITIAL_COLOR = "#1f2937"
LEGEND_MARGIN_PX = 10

CATEGORY_COLORS: Dict[ServiceCategory, str] = {
    ServiceCategory.HOSPITAL: "#ef4444",
    ServiceCategory.ATM: "#10b981",
    ServiceCategory.GROCERY: "#f59e0b",
    ServiceCategory.PHARMACY: "#8b5cf6",
    ServiceCategory.GAS_STATION: "#06b6d4",
    ServiceCategory.OTHER: "#6b7280",
}


def category_color(category: ServiceCategory) -> str:
    return CATEGORY_COLORS.get(category, CATEGORY_COLORS[ServiceCategory.OTHER])


def _load_font(size: int, bold: bool = False) -> ImageFont.ImageFont:
    name = "DejaVuSans-Bold.ttf" if bold else "DejaVuSans.ttf"
    try:
        return ImageFont.truetype(name, size)
    except Exception:
        return ImageFont.load_default()


def _measure_text(font: ImageFont.ImageFont, text: str) -> Tuple[int, int]:
    """Safely measure text size across Pillow versions using getbbox."""
    bbox = font.getbbox(text)
    return bbox[2] - bbox[0], bbox[3] - bbox[1]


def _draw_centered_text(
    draw: ImageDraw.ImageDraw, center: Tuple[float, float], text: str, font: ImageFont.ImageFont, fill: str
) -> None:
    w, h = _measure_text(font, text)
    x, y = center
    draw.text((x - w / 2, y - h / 2), text, fill=fill, font=font)


def compute_bounds(
    location: UserLocation, places: Sequence[PlaceRecord]
) -> Dict[str, float]:
    """Lat/lon extent of the user plus places; degenerate ranges become MIN_DEGREE_RANGE."""
    lats = [location.latitude] + [p.latitude for p in places]
    lons = [location.longitude] + [p.longitude for p in places]
    min_lat, max_lat = min(lats), max(lats)
    min_lon, max_lon = min(lons), max(lons)
    return {
        "min_lat": min_lat,
        "max_lat": max_lat,
        "min_lon": min_lon,
        "max_lon": max_lon,
        "lat_range": (max_lat - min_lat) or MIN_DEGREE_RANGE,
        "lon_range": (max_lon - min_lon) or MIN_DEGREE_RANGE,
    }


def project_point(
    lat: float, lon: float, bounds: Dict[str, float], width: int, height: int, padding: int = MAP_PADDING_PX
) -> Tuple[float, float]:
    """Linear lat/lon -> pixel mapping inside a padded canvas (north up)."""
    map_width = width - 2 * padding
    map_height = height - 2 * padding
    x = padding + ((lon - bounds["min_lon"]) / bounds["lon_range"]) * map_width
    y = padding + ((bounds["max_lat"] - lat) / bounds["lat_range"]) * map_height
    return x, y


def _draw_grid(draw: ImageDraw.ImageDraw, width: int, height: int, scale: int) -> None:
    step = GRID_SPACING_PX * scale
    for x in range(0, width + 1, step):
        draw.line([(x, 0), (x, height)], fill=GRID_COLOR, width=scale)
    for y in range(0, height + 1, step):
        draw.line([(0, y), (width, y)], fill=GRID_COLOR, width=scale)


def _draw_legend(
    draw: ImageDraw.ImageDraw, categories: Sequence[ServiceCategory], width: int, scale: int
) -> None:
    """Small category legend in the top-right corner."""
    if not categories:
        return
    font = _load_font(10 * scale)
    radius = 5 * scale
    gap = 16 * scale
    margin = LEGEND_MARGIN_PX * scale
    labels = [c.value.replace("_", " ") for c in categories]
    text_w = max(_measure_text(font, label)[0] for label in labels)
    x0 = width - margin - text_w - 3 * radius
    y = margin + radius
    for category, label in zip(categories, labels):
        draw.ellipse((x0 - radius, y - radius, x0 + radius, y + radius), fill=category_color(category))
        draw.text((x0 + 2 * radius, y - radius - scale), label, fill=LABEL_COLOR, font=font)
        y += gap


def draw_essentials_map(
    location: UserLocation,
    places: Sequence[PlaceRecord],
    width: int = 800,
    height: int = 600,
) -> Image.Image:
    """Return the map as a PIL image. At most MAX_MAP_PLACES places are drawn."""
    places = list(places)[:MAX_MAP_PLACES]
    scale = UPSCALE_FACTOR
    draw_w, draw_h = width * scale, height * scale

    img = Image.new("RGBA", (draw_w, draw_h), BACKGROUND_COLOR)
    draw = ImageDraw.Draw(img, "RGBA")
    _draw_grid(draw, draw_w, draw_h, scale)

    bounds = compute_bounds(location, places)
    label_font = _load_font(11 * scale, bold=True)
    initial_font = _load_font(10 * scale)

    drawn = 0
    for place in places:
        x, y = project_point(place.latitude, place.longitude, bounds, draw_w, draw_h, MAP_PADDING_PX * scale)
        if x != x or y != y:  # NaN
            logger.warning("Invalid coordinates for %s; skipping marker", place.name)
            continue
        r = PLACE_MARKER_RADIUS * scale
        draw.ellipse(
            (x - r, y - r, x + r, y + r),
            fill=category_color(place.category),
            outline="#ffffff",
            width=PLACE_MARKER_OUTLINE * scale,
        )
        _draw_centered_text(draw, (x, y + 25 * scale), f"{place.distance_km:.1f}km", label_font, LABEL_COLOR)
        _draw_centered_text(draw, (x, y - 22 * scale), place.category.value[:1].upper(), initial_font, INITIAL_COLOR)
        drawn += 1

    # User marker goes on top
    ux, uy = project_point(location.latitude, location.longitude, bounds, draw_w, draw_h, MAP_PADDING_PX * scale)
    halo = USER_HALO_RADIUS * scale
    draw.ellipse((ux - halo, uy - halo, ux + halo, uy + halo), fill=USER_HALO_COLOR)
    r = USER_MARKER_RADIUS * scale
    draw.ellipse(
        (ux - r, uy - r, ux + r, uy + r), fill=USER_COLOR, outline="#ffffff", width=USER_MARKER_OUTLINE * scale
    )
    _draw_centered_text(draw, (ux, uy - 25 * scale), "You", _load_font(12 * scale, bold=True), INITIAL_COLOR)

    seen: List[ServiceCategory] = []
    for place in places:
        if place.category not in seen:
            seen.append(place.category)
    _draw_legend(draw, [c for c in ServiceCategory if c in seen], draw_w, scale)

    logger.debug("Drew %d of %d place markers on %dx%d map", drawn, len(places), width, height)
    return img.resize((width, height), resample=Image.LANCZOS).convert("RGB")


def render_essentials_map(
    location: UserLocation,
    places: Sequence[PlaceRecord],
    output_path: str,
    width: int = 800,
    height: int = 600,
) -> str:
    """
    Render the map to a PNG file.

    Returns the absolute output path, or "" if rendering failed.
    """
    try:
        img = draw_essentials_map(location, places, width=width, height=height)
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        img.save(path, format="PNG")
    except (OSError, ValueError) as exc:
        logger.warning("Failed to render essentials map to %s: %s", output_path, exc)
        return ""
    logger.info("Rendered essentials map with %d places to %s", min(len(places), MAX_MAP_PLACES), output_path)
    return str(Path(output_path).resolve())
