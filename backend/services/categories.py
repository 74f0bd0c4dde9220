"""
Normalize provider category vocabularies onto ServiceCategory.

Google Places tags a place with several types at once, OSM with a single
amenity/shop value. Both go through the same priority-ordered family table so
an ambiguous place always lands in the first matching family.
"""
from __future__ import annotations

from typing import Iterable, List, Mapping, Optional, Tuple, Union

from domain.models import ServiceCategory

# Checked top to bottom; first family with any matching token wins.
CATEGORY_FAMILIES: Tuple[Tuple[ServiceCategory, frozenset], ...] = (
    (ServiceCategory.HOSPITAL, frozenset({"hospital", "doctor", "doctors", "health", "clinic", "medical"})),
    (ServiceCategory.ATM, frozenset({"atm", "bank", "finance"})),
    (
        ServiceCategory.GROCERY,
        frozenset({"grocery_or_supermarket", "supermarket", "food", "convenience_store", "convenience", "grocery"}),
    ),
    (ServiceCategory.PHARMACY, frozenset({"pharmacy", "drugstore", "health"})),
    (ServiceCategory.GAS_STATION, frozenset({"gas_station", "fuel", "petrol"})),
)

# OSM values are matched one-to-one; the Overpass query only asks for these.
OSM_CATEGORY_MAP = {
    "hospital": ServiceCategory.HOSPITAL,
    "clinic": ServiceCategory.HOSPITAL,
    "doctors": ServiceCategory.HOSPITAL,
    "pharmacy": ServiceCategory.PHARMACY,
    "bank": ServiceCategory.ATM,
    "atm": ServiceCategory.ATM,
    "fuel": ServiceCategory.GAS_STATION,
    "supermarket": ServiceCategory.GROCERY,
    "convenience": ServiceCategory.GROCERY,
    "grocery": ServiceCategory.GROCERY,
}

CATEGORY_ICONS = {
    ServiceCategory.HOSPITAL: "🏥",
    ServiceCategory.ATM: "🏧",
    ServiceCategory.GROCERY: "🛒",
    ServiceCategory.PHARMACY: "💊",
    ServiceCategory.GAS_STATION: "⛽",
    ServiceCategory.OTHER: "📍",
}


def _as_tokens(tokens: Union[str, Iterable[str], None]) -> List[str]:
    if tokens is None:
        return []
    if isinstance(tokens, str):
        tokens = [tokens]
    return [str(t).strip().lower() for t in tokens if t]


def normalize_category(tokens: Union[str, Iterable[str], None]) -> ServiceCategory:
    """
    Resolve one provider token, or a list of them, to exactly one category.

    >>> normalize_category(["bank", "convenience_store"])
    <ServiceCategory.ATM: 'atm'>
    """
    candidates = set(_as_tokens(tokens))
    if not candidates:
        return ServiceCategory.OTHER
    for category, family in CATEGORY_FAMILIES:
        if candidates & family:
            return category
    return ServiceCategory.OTHER


def category_from_osm_tags(tags: Optional[Mapping[str, str]]) -> ServiceCategory:
    """Map an OSM element's amenity (or shop) tag to a category."""
    tags = tags or {}
    value = tags.get("amenity") or tags.get("shop")
    if not value:
        return ServiceCategory.OTHER
    return OSM_CATEGORY_MAP.get(value.strip().lower(), ServiceCategory.OTHER)


def category_label(category: ServiceCategory) -> str:
    """Badge text, e.g. 'GAS STATION'."""
    return category.value.replace("_", " ").upper()


def category_title(category: ServiceCategory) -> str:
    """First letter capitalised, underscores kept ('Gas_station')."""
    value = category.value
    return value[:1].upper() + value[1:]


def category_icon(category: ServiceCategory) -> str:
    return CATEGORY_ICONS.get(category, CATEGORY_ICONS[ServiceCategory.OTHER])
