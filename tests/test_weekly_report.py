# tests/test_weekly_report.py
from __future__ import annotations

from datetime import timedelta

import pytest

from core.models.dish import Ingredient
from core.models.plan import DailyDietPlan, MealComposition
from core.weekly_report import nutrition_stats, shopping_list
from services.catalog import FrameRecipeCatalog
from tests.helpers import MONDAY, make_dish

GARLIC_G = Ingredient(name="garlic", quantity=3, unit="g", category="vegetable")

NAMUL = make_dish("spinach namul", "side", 45, ingredients=(
    Ingredient(name="spinach", quantity=100, unit="g", category="vegetable"),
    GARLIC_G,
))
SPROUT_SOUP = make_dish("bean sprout soup", "soup", 45, ingredients=(
    Ingredient(name="soybean sprouts", quantity=80, unit="g", category="vegetable"),
    GARLIC_G,
    Ingredient(name="garlic", quantity=1, unit="clove", category="vegetable"),
))
RICE = make_dish("white rice", "rice", 300, ingredients=(
    Ingredient(name="white rice", quantity=90, unit="g", category="grain"),
))

CATALOG = FrameRecipeCatalog([NAMUL, SPROUT_SOUP, RICE])


def _day(offset: int) -> DailyDietPlan:
    return DailyDietPlan(
        date=MONDAY + timedelta(days=offset),
        lunch=MealComposition(rice=RICE, sides=[NAMUL], soup=SPROUT_SOUP),
    )


def test_ingredients_merge_by_name_and_unit():
    items = {(i.ingredient_name, i.unit): i for i in shopping_list([_day(0), _day(1)], CATALOG)}

    garlic_g = items[("garlic", "g")]
    assert garlic_g.total_quantity == pytest.approx(12)      # 2 dishes x 2 days x 3 g
    assert garlic_g.recipes_using == ["bean sprout soup", "spinach namul"]
    assert not garlic_g.is_purchased

    assert items[("garlic", "clove")].total_quantity == pytest.approx(2)
    assert items[("white rice", "g")].total_quantity == pytest.approx(180)


def test_shopping_list_sorted_by_category_then_name():
    names = [(i.category, i.ingredient_name) for i in shopping_list([_day(0)], CATALOG)]
    assert names == sorted(names)
    assert names[0] == ("grain", "white rice")


def test_no_plans_no_shopping():
    assert shopping_list([], CATALOG) == []


def test_stats_zero_for_absent_days():
    dates = [MONDAY + timedelta(days=i) for i in range(7)]
    plans = {dates[0]: _day(0), dates[2]: None}
    stats = nutrition_stats(dates, plans)

    assert len(stats) == 7
    assert stats[0].total_calories == pytest.approx(390)
    assert stats[0].meal_count == 1
    assert stats[0].total_sodium == pytest.approx(300)
    for s in stats[1:]:
        assert (s.total_calories, s.total_protein, s.meal_count) == (0, 0, 0)
    assert [s.day_of_week for s in stats] == list(range(1, 8))
