# tests/test_constraint_filter.py
from __future__ import annotations

from core.constraint_filter import ConstraintFilter
from core.models.dish import Ingredient
from services.catalog import FrameAllergenTable, FrameExclusionTable
from tests.helpers import make_dish

EXCLUSIONS = FrameExclusionTable(
    [
        {"disease_code": "diabetes", "food_name": "Sugar", "severity": "severe", "excluded_type": "ingredient"},
        {"disease_code": "diabetes", "food_name": "fried", "severity": "moderate",
         "excluded_type": "recipe_keyword", "reason": "deep-fried"},
        {"disease_code": "gout", "food_name": "mackerel", "severity": "severe", "excluded_type": "ingredient"},
    ]
)

CANDIED_YAM = make_dish("candied yam", "side", 150, ingredients=(Ingredient(name="sugar"), Ingredient(name="yam")))
FRIED_CHICKEN = make_dish("Fried Chicken", "side", 320)
MACKEREL = make_dish("grilled fish", "side", 210, keywords=("mackerel",))
NAMUL = make_dish("spinach namul", "side", 45)
PEANUT_STEW = make_dish("peanut stew", "side", 180, allergy_tags=("peanut",))


class _CountingTable:
    def __init__(self, inner):
        self.inner = inner
        self.calls = 0

    def excluded_items(self, codes):
        self.calls += 1
        return self.inner.excluded_items(codes)


def test_disease_ingredient_is_excluded():
    f = ConstraintFilter(EXCLUSIONS)
    c = f.constraints_for(["diabetes"], [])
    assert f.filter([CANDIED_YAM, NAMUL], c) == [NAMUL]


def test_recipe_keyword_matches_title_case_insensitively():
    f = ConstraintFilter(EXCLUSIONS)
    c = f.constraints_for(["diabetes"], [])
    assert not f.is_allowed(FRIED_CHICKEN, c)
    assert f.disease_violation(FRIED_CHICKEN, c.excluded) == "deep-fried"


def test_dish_keyword_counts_as_ingredient():
    f = ConstraintFilter(EXCLUSIONS)
    assert not f.is_allowed(MACKEREL, f.constraints_for(["gout"], []))
    assert f.is_allowed(MACKEREL, f.constraints_for(["diabetes"], []))


def test_allergy_overlap_rejects_regardless_of_case():
    f = ConstraintFilter(EXCLUSIONS)
    c = f.constraints_for([], ["Peanut"])
    assert f.filter([PEANUT_STEW, NAMUL], c) == [NAMUL]


def test_no_constraints_keeps_everything_in_order():
    f = ConstraintFilter(EXCLUSIONS)
    dishes = [PEANUT_STEW, CANDIED_YAM, FRIED_CHICKEN, NAMUL]
    assert f.filter(dishes, f.constraints_for([], [])) == dishes


def test_exclusions_resolved_once_per_disease_set():
    table = _CountingTable(EXCLUSIONS)
    f = ConstraintFilter(table)
    f.constraints_for(["gout", "diabetes"], [])
    f.constraints_for(["diabetes", "gout"], ["egg"])
    f.constraints_for([], [])
    assert table.calls == 1


# ── derived allergy tags ────────────────────────────────────────────
ALLERGENS = FrameAllergenTable(
    [
        {"allergy_code": "soy", "ingredient_name": "Tofu"},
        {"allergy_code": "wheat", "ingredient_name": "soy sauce"},
        {"allergy_code": "soy", "ingredient_name": "soy sauce"},
    ]
)

SATAY = make_dish("chicken satay", "side", 250, ingredients=(Ingredient(name="chicken"), Ingredient(name="peanut")))
PB_TOAST = make_dish("toast", "side", 200, ingredients=(Ingredient(name="peanut butter"),))
MAPO = make_dish("mapo tofu", "side", 220, ingredients=(Ingredient(name="tofu"), Ingredient(name="soy sauce")))


def test_untagged_ingredient_still_triggers_allergy():
    f = ConstraintFilter(EXCLUSIONS)
    c = f.constraints_for([], ["peanut"])
    assert not f.is_allowed(SATAY, c)
    assert not f.is_allowed(PB_TOAST, c)
    assert f.allergy_violation(SATAY, c.allergies) == "allergen peanut"


def test_allergen_table_links_ingredients_to_codes():
    f = ConstraintFilter(EXCLUSIONS, ALLERGENS)
    assert f.allergy_tags(MAPO) == {"soy", "wheat"}
    assert not f.is_allowed(MAPO, f.constraints_for([], ["wheat"]))
    assert f.is_allowed(MAPO, f.constraints_for([], ["egg"]))
    # without the table only the word match is left, and "wheat" is not a word here
    assert ConstraintFilter(EXCLUSIONS).is_allowed(MAPO, f.constraints_for([], ["wheat"]))
