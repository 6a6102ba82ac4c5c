# tests/test_plan_models.py
from __future__ import annotations

import pytest

from core.models.dish import Dish
from core.models.plan import DailyDietPlan, MealComposition
from core.weekly_report import day_stats
from tests.helpers import MONDAY, make_dish

BIBIMBAP = make_dish("bibimbap", "rice", 600)
RICE = make_dish("steamed rice", "rice", 300)
NAMUL = make_dish("spinach namul", "side", 45)
APPLE = make_dish("apple", "snack", 95)


def test_meal_slot_can_hold_a_single_dish():
    plan = DailyDietPlan(
        date=MONDAY, lunch=BIBIMBAP, dinner=MealComposition(rice=RICE, sides=[NAMUL]), snack=APPLE
    )

    assert plan.dishes() == [("rice", BIBIMBAP), ("rice", RICE), ("side", NAMUL), ("snack", APPLE)]
    assert plan.total_nutrition.calories == pytest.approx(600 + 300 + 45 + 95)
    assert day_stats(MONDAY, plan).meal_count == 3


def test_single_dish_slot_survives_json():
    plan = DailyDietPlan(date=MONDAY, breakfast=BIBIMBAP, dinner=MealComposition(rice=RICE, sides=[NAMUL]))
    restored = DailyDietPlan.model_validate_json(plan.model_dump_json())

    assert isinstance(restored.breakfast, Dish)
    assert restored.breakfast.title == "bibimbap"
    assert isinstance(restored.dinner, MealComposition)
    assert restored.dinner.composition_summary == ["steamed rice", "spinach namul"]
    assert restored.total_nutrition == plan.total_nutrition
