# tests/test_seasonal_fruits.py
from __future__ import annotations

from core.seasonal_fruits import FruitCatalog

fruits = FruitCatalog()


def test_seasonal_orders_by_availability():
    # banana is year-round; cherry is the only medium-availability one
    assert [f.id for f in fruits.seasonal(6)] == ["watermelon", "melon", "banana", "cherry"]


def test_recommend_takes_first_safe_seasonal_fruit():
    snack = fruits.recommend(100, 6)
    assert snack.fruit.id == "watermelon"
    assert snack.servings == 3          # 100 / 30 kcal, capped at 3


def test_disease_avoid_list_is_honoured():
    snack = fruits.recommend(100, 7, diseases=["diabetes"])
    assert snack.fruit.id == "peach"


def test_fallback_when_nothing_seasonal_survives():
    # July + diabetes leaves only peach; a peach allergy removes it, banana
    # is also avoided for diabetes, so strawberry is the last resort
    snack = fruits.recommend(100, 7, diseases=["diabetes"], allergies=["Peach"])
    assert snack.fruit.id == "strawberry"


def test_no_fruit_at_all_returns_none():
    assert FruitCatalog([]).recommend(100, 6) is None


def test_prefers_fruit_not_used_yet():
    assert fruits.recommend(100, 6, exclude_names={"watermelon"}).fruit.id == "melon"
    everything = {f.name for f in fruits.seasonal(6)}
    assert fruits.recommend(100, 6, exclude_names=everything).fruit.id == "watermelon"


def test_servings_are_clamped():
    assert fruits.recommend(5, 6).servings == 1
    assert fruits.recommend(2000, 6).servings == 3


def test_accept_hook_filters_fruits():
    snack = fruits.recommend(100, 6, accept=lambda dish: dish.title != "watermelon")
    assert snack.fruit.id == "melon"


def test_as_dish_scales_nutrition():
    dish = fruits.recommend(100, 6).as_dish()
    assert dish.dish_type == "snack"
    assert dish.source == "seasonal"
    assert dish.nutrition.calories == 90
    assert dish.ingredients[0].quantity == 3
