# tests/helpers.py
from __future__ import annotations

from datetime import date
from pathlib import Path

from core.models.dish import Dish, Ingredient, Nutrition

SAMPLE_CATALOG = Path(__file__).resolve().parent.parent / "data" / "sample_catalog.json"

MONDAY = date(2024, 6, 3)   # ISO week 23, June


def make_dish(
    title: str,
    dish_type: str,
    kcal: float,
    carbs: float = 0.0,
    protein: float = 0.0,
    fat: float = 0.0,
    allergy_tags: tuple[str, ...] = (),
    ingredients: tuple[Ingredient, ...] = (),
    keywords: tuple[str, ...] = (),
    meal_types: tuple[str, ...] = (),
) -> Dish:
    return Dish(
        title=title,
        dish_type=dish_type,
        meal_types=list(meal_types),
        nutrition=Nutrition(calories=kcal, carbs=carbs, protein=protein, fat=fat, sodium=100),
        ingredients=list(ingredients) or [Ingredient(name=title, quantity=100, unit="g")],
        allergy_tags=list(allergy_tags),
        keywords=list(keywords),
    )


def big_catalog_dishes() -> list[Dish]:
    """Enough distinct dishes for a full week with no repeats."""
    dishes = []
    for variety in ("white rice", "brown rice", "multigrain rice"):
        dishes += [make_dish(f"{variety} bowl {i}", "rice", 280 + i, 60, 6, 1) for i in range(10)]
    dishes += [make_dish(f"side {i}", "side", 60 + i * 3, 8, 5, 3) for i in range(90)]
    dishes += [make_dish(f"soup {i}", "soup", 80 + i * 2, 6, 7, 4) for i in range(30)]
    return dishes
