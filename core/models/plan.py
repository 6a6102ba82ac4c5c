"""
core/models/plan.py
────────────────────────────────────────────────────────────────────────
Output entities of the diet engine.

Totals are computed fields, never stored: a meal's `total_nutrition` is
always the sum of the dishes it actually holds and a day's total is the
sum of its present slots.

Breakfast, lunch and dinner normally hold a `MealComposition`; a stored
plan may also put a single catalog dish in one of them.
"""
from __future__ import annotations

from datetime import date
from typing import Annotated, Iterator, Literal, Union

from pydantic import BaseModel, Field, computed_field

from core.models.dish import Dish, Nutrition

MEAL_SLOTS = ("breakfast", "lunch", "dinner", "snack")


class MealComposition(BaseModel):
    rice: Dish | None = None
    sides: list[Dish] = []
    soup: Dish | None = None

    def dishes(self) -> list[Dish]:
        out = [self.rice] if self.rice else []
        out.extend(self.sides)
        if self.soup:
            out.append(self.soup)
        return out

    @computed_field  # type: ignore[misc]
    @property
    def total_nutrition(self) -> Nutrition:
        return Nutrition.total(d.nutrition for d in self.dishes())

    @computed_field  # type: ignore[misc]
    @property
    def composition_summary(self) -> list[str]:
        return [d.title for d in self.dishes()]

    @property
    def is_empty(self) -> bool:
        return not self.dishes()


class DailyDietPlan(BaseModel):
    plan_type: Literal["daily"] = "daily"
    date: date
    # Dish first: a composition dict never validates as a Dish (no title)
    breakfast: Dish | MealComposition | None = None
    lunch: Dish | MealComposition | None = None
    dinner: Dish | MealComposition | None = None
    snack: Dish | None = None

    def meals(self) -> Iterator[tuple[str, Dish | MealComposition]]:
        """Yield the present, non-empty slots in serving order."""
        for slot in MEAL_SLOTS:
            meal = getattr(self, slot)
            if meal is None:
                continue
            if isinstance(meal, MealComposition) and meal.is_empty:
                continue
            yield slot, meal

    def dishes(self) -> list[tuple[str, Dish]]:
        """(category, dish) for every dish served in the day."""
        out: list[tuple[str, Dish]] = []
        for slot, meal in self.meals():
            if isinstance(meal, Dish):
                out.append(("snack" if slot == "snack" else meal.dish_type or "side", meal))
                continue
            if meal.rice:
                out.append(("rice", meal.rice))
            out.extend(("side", s) for s in meal.sides)
            if meal.soup:
                out.append(("soup", meal.soup))
        return out

    @computed_field  # type: ignore[misc]
    @property
    def total_nutrition(self) -> Nutrition:
        parts = []
        for _, meal in self.meals():
            parts.append(meal.nutrition if isinstance(meal, Dish) else meal.total_nutrition)
        return Nutrition.total(parts)

    @property
    def is_empty(self) -> bool:
        return next(self.meals(), None) is None


class FamilyDietPlan(BaseModel):
    plan_type: Literal["family"] = "family"
    date: date
    individual_plans: dict[str, DailyDietPlan] = {}  # "user" = primary user
    unified_plan: DailyDietPlan | None = None

    @property
    def primary_plan(self) -> DailyDietPlan | None:
        return self.unified_plan or self.individual_plans.get("user")


class ShoppingListItem(BaseModel):
    ingredient_name: str
    total_quantity: float
    unit: str
    category: str
    recipes_using: list[str]
    is_purchased: bool = False


AnyDayPlan = Annotated[Union[DailyDietPlan, FamilyDietPlan], Field(discriminator="plan_type")]


class WeeklyNutritionStats(BaseModel):
    day_of_week: int          # 1 = Monday … 7 = Sunday
    date: date
    total_calories: float = 0.0
    total_carbohydrates: float = 0.0
    total_protein: float = 0.0
    total_fat: float = 0.0
    total_sodium: float = 0.0
    meal_count: int = 0


class WeekMetadata(BaseModel):
    user_id: str
    week_start_date: date
    week_year: int
    week_number: int
    is_family: bool
    total_recipes_count: int
    generation_duration_ms: int


class WeeklyDiet(BaseModel):
    metadata: WeekMetadata
    daily_plans: dict[date, AnyDayPlan | None]
    shopping_list: list[ShoppingListItem]
    nutrition_stats: list[WeeklyNutritionStats]

    @computed_field  # type: ignore[misc]
    @property
    def missing_dates(self) -> list[date]:
        return [d for d, plan in self.daily_plans.items() if plan is None]
