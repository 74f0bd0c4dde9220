"""Plain-text list view and debug panel for an aggregation run."""
from __future__ import annotations

from typing import List, Optional, Sequence

from domain.models import PlaceRecord, UserLocation
from services.categories import category_icon, category_label
from services.essentials import summarize_places


def format_distance(distance_km: float) -> str:
    return f"{distance_km:.1f} km away"


def format_place_line(place: PlaceRecord) -> str:
    """
    Render one list entry, e.g.

        🏥 City Hospital [HOSPITAL]
           12 Main St
           0.4 km away · ★ 4.5 · Open Now
           ☎ +1 555 0100
    """
    lines = [f"{category_icon(place.category)} {place.name} [{category_label(place.category)}]"]
    lines.append(f"   {place.address}")

    details = [format_distance(place.distance_km)]
    if place.rating:
        details.append(f"★ {place.rating}")
    if place.is_open is not None:
        details.append("Open Now" if place.is_open else "Closed")
    lines.append("   " + " · ".join(details))

    if place.phone:
        lines.append(f"   ☎ {place.phone}")
    return "\n".join(lines)


def render_essentials_list(places: Sequence[PlaceRecord]) -> str:
    if not places:
        return "No nearby essentials found."
    header = f"{len(places)} Nearby Essentials Found"
    return "\n\n".join([header] + [format_place_line(p) for p in places])


def render_debug_panel(location: Optional[UserLocation], places: Sequence[PlaceRecord]) -> str:
    summary = summarize_places(places)
    lines: List[str] = ["Debug Info"]
    if location is not None:
        lines.append(f"User Location: {location.latitude:.4f}, {location.longitude:.4f}")
    lines.append(f"Total Places: {summary['total']}")
    if summary["synthetic"]:
        lines.append(f"Synthetic Places: {summary['synthetic']} (fallback/test data, not real)")
    lines.append("By Type:")
    for category, count in summary["by_category"].items():
        lines.append(f"  {category}: {count}")
    lines.append(f"First {len(summary['preview'])} Places:")
    for place in summary["preview"]:
        lines.append(f"  {place.name} ({place.category.value}) - {place.distance_km:.1f}km")
    return "\n".join(lines)
