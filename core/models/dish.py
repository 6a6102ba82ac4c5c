from __future__ import annotations

from typing import Iterable, Literal

from pydantic import BaseModel, ConfigDict

DishType = Literal["rice", "side", "soup", "snack"]
MealType = Literal["breakfast", "lunch", "dinner"]

DISH_TYPES: tuple[DishType, ...] = ("rice", "side", "soup", "snack")
MEAL_TYPES: tuple[MealType, ...] = ("breakfast", "lunch", "dinner")


class Nutrition(BaseModel):
    calories: float = 0.0
    carbs: float = 0.0
    protein: float = 0.0
    fat: float = 0.0
    sodium: float = 0.0       # mg
    fiber: float = 0.0
    sugar: float = 0.0        # g
    potassium: float = 0.0    # mg
    phosphorus: float = 0.0   # mg
    purine: float = 0.0       # mg

    model_config = ConfigDict(frozen=True)

    def __add__(self, other: Nutrition) -> Nutrition:
        return Nutrition(**{k: getattr(self, k) + getattr(other, k) for k in Nutrition.model_fields})

    def scaled(self, factor: float) -> Nutrition:
        return Nutrition(**{k: getattr(self, k) * factor for k in Nutrition.model_fields})

    @classmethod
    def total(cls, parts: Iterable[Nutrition]) -> Nutrition:
        out = cls()
        for part in parts:
            out = out + part
        return out


class Ingredient(BaseModel):
    name: str
    quantity: float = 0.0
    unit: str = ""
    category: str = "other"

    model_config = ConfigDict(frozen=True)


class Dish(BaseModel):
    """Read-only catalog entry."""

    title: str
    dish_type: DishType | None = None
    meal_types: list[MealType] = []   # empty → fits any meal
    nutrition: Nutrition = Nutrition()
    ingredients: list[Ingredient] = []
    allergy_tags: list[str] = []
    keywords: list[str] = []
    description: str = ""
    source: str = "catalog"

    model_config = ConfigDict(frozen=True)

    def ingredient_names(self) -> set[str]:
        return {i.name.lower() for i in self.ingredients}
