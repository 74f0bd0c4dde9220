from domain.models import ServiceCategory
from services.categories import (
    category_from_osm_tags,
    category_icon,
    category_label,
    category_title,
    normalize_category,
)


def test_bank_beats_convenience_store():
    assert normalize_category(["bank", "convenience_store"]) == ServiceCategory.ATM


def test_priority_order_is_fixed_regardless_of_token_order():
    assert normalize_category(["gas_station", "pharmacy", "hospital"]) == ServiceCategory.HOSPITAL
    assert normalize_category(["convenience_store", "bank"]) == ServiceCategory.ATM
    assert normalize_category(["fuel", "drugstore"]) == ServiceCategory.PHARMACY


def test_health_resolves_to_hospital_family_first():
    assert normalize_category(["health"]) == ServiceCategory.HOSPITAL


def test_single_token_and_case():
    assert normalize_category("Supermarket") == ServiceCategory.GROCERY
    assert normalize_category("petrol") == ServiceCategory.GAS_STATION


def test_unknown_and_empty_tokens_are_other():
    assert normalize_category(["point_of_interest", "establishment"]) == ServiceCategory.OTHER
    assert normalize_category([]) == ServiceCategory.OTHER
    assert normalize_category(None) == ServiceCategory.OTHER


def test_osm_tags_amenity_then_shop():
    assert category_from_osm_tags({"amenity": "doctors"}) == ServiceCategory.HOSPITAL
    assert category_from_osm_tags({"amenity": "fuel"}) == ServiceCategory.GAS_STATION
    assert category_from_osm_tags({"shop": "convenience"}) == ServiceCategory.GROCERY
    assert category_from_osm_tags({"amenity": "atm", "shop": "supermarket"}) == ServiceCategory.ATM
    assert category_from_osm_tags({"amenity": "restaurant"}) == ServiceCategory.OTHER
    assert category_from_osm_tags(None) == ServiceCategory.OTHER


def test_labels():
    assert category_label(ServiceCategory.GAS_STATION) == "GAS STATION"
    assert category_title(ServiceCategory.GAS_STATION) == "Gas_station"
    assert category_title(ServiceCategory.HOSPITAL) == "Hospital"
    assert category_icon(ServiceCategory.ATM) == "🏧"
