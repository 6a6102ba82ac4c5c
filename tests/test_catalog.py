# tests/test_catalog.py
from __future__ import annotations

import pytest

from core.errors import CatalogUnavailableError, LookupUnavailableError
from services.catalog import FrameExclusionTable, InMemoryRecipeHistory, load_catalog_json
from tests.helpers import SAMPLE_CATALOG


def test_sample_catalog_loads():
    catalog, exclusions, allergens = load_catalog_json(SAMPLE_CATALOG)
    assert len(catalog) == 26
    assert allergens.allergens_in(["Soy Sauce"]) == {"soy", "wheat"}
    assert {e.food_name for e in exclusions.excluded_items(["gout"])} == {
        "mackerel", "dried anchovies", "beer",
    }


def test_search_filters_type_meal_and_titles():
    catalog, _, _ = load_catalog_json(SAMPLE_CATALOG)

    breakfast_rice = [d.title for d in catalog.search("rice", "breakfast")]
    assert "sweet potato rice" not in breakfast_rice
    assert breakfast_rice[0] == "steamed white rice"        # catalog order

    no_white = catalog.search("rice", "lunch", exclude_titles=["steamed white rice"])
    assert all(d.title != "steamed white rice" for d in no_white)

    assert len(catalog.search("side", limit=3)) == 3
    assert [d.title for d in catalog.search("rice", title_contains="BROWN")] == ["brown rice bowl"]


def test_ingredients_come_from_catalog_entry():
    catalog, _, _ = load_catalog_json(SAMPLE_CATALOG)
    dish = catalog.search("side", title_contains="spinach")[0]
    assert {i.name for i in catalog.ingredients_for(dish)} == {"spinach", "sesame oil", "garlic"}


def test_missing_catalog_raises_lookup_error(tmp_path):
    with pytest.raises(CatalogUnavailableError):
        load_catalog_json(tmp_path / "nope.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(LookupUnavailableError):
        load_catalog_json(broken)


def test_exclusion_table_without_codes_is_empty():
    table = FrameExclusionTable([{"disease_code": "gout", "food_name": "liver"}])
    assert table.excluded_items([]) == []
    row = table.excluded_items(["gout"])[0]
    assert row.severity == "moderate" and row.excluded_type == "ingredient"


def test_history_is_per_user():
    history = InMemoryRecipeHistory({"u1": ["bulgogi"]})
    assert history.recently_used("u1") == ["bulgogi"]
    assert history.recently_used("u2") == []
