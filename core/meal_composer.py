"""
core/meal_composer.py
────────────────────────────────────────────────────────────────────────
Assemble one meal from the dish selector.

Staple meals split their budget rice 35 % / sides 45 % (evenly over the
side count) / soup 20 % and call the selector once per slot. A slot
with no candidate is simply left out. Snacks go to the seasonal fruit
recommender instead.

When a `DailyLimitTracker` is passed, every candidate has to fit the
day's remaining nutrient caps and every chosen dish is charged to it.
"""
from __future__ import annotations

import logging
from typing import Iterable

from core.constraint_filter import DietConstraints
from core.daily_limits import DailyLimitTracker
from core.dish_selector import DishSelector
from core.diversity import DiversityTracker
from core.models.dish import Dish
from core.models.plan import MealComposition
from core.policy import DietPolicy
from core.seasonal_fruits import FruitCatalog

_LOG = logging.getLogger(__name__)


class MealComposer:
    def __init__(
        self,
        selector: DishSelector,
        fruits: FruitCatalog | None = None,
        policy: DietPolicy | None = None,
    ) -> None:
        self._selector = selector
        self._fruits = fruits or FruitCatalog()
        self._policy = policy or DietPolicy()

    def compose(
        self,
        meal_type: str,
        target_calories: float,
        constraints: DietConstraints,
        child_diet: bool = False,
        avoid: Iterable[str] = (),
        tracker: DiversityTracker | None = None,
        preferred_rice: str | None = None,
        limits: DailyLimitTracker | None = None,
    ) -> MealComposition:
        """
        Build rice + sides + soup for `meal_type`.

        `avoid` is relaxed first, then the tracker's weekly exclusions;
        titles already in this meal are hard, so sides never repeat
        each other.
        """
        p = self._policy
        avoid = set(avoid)
        in_meal: list[str] = []
        accept = limits.can_add if limits else None

        def pick(dish_type: str, kcal: float, prefer: str | None = None) -> Dish | None:
            dish = self._selector.select(
                dish_type,
                meal_type,
                kcal,
                constraints,
                exclude_titles=in_meal,
                child_diet=child_diet,
                soft_exclude=avoid,
                prefer_title=prefer,
                ceiling_exclude=tracker.exclusions(dish_type) if tracker else (),
                accept=accept,
            )
            if dish:
                in_meal.append(dish.title)
                if limits:
                    limits.add(dish)
            return dish

        rice = pick("rice", target_calories * p.rice_ratio, preferred_rice)

        side_kcal = target_calories * p.sides_ratio / p.side_count
        sides = [s for s in (pick("side", side_kcal) for _ in range(p.side_count)) if s]

        soup = pick("soup", target_calories * p.soup_ratio)

        meal = MealComposition(rice=rice, sides=sides, soup=soup)
        _LOG.debug(
            "%s composed: %s (%.0f / %.0f kcal)",
            meal_type, ", ".join(meal.composition_summary) or "-",
            meal.total_nutrition.calories, target_calories,
        )
        return meal

    def snack(
        self,
        target_calories: float,
        month: int,
        constraints: DietConstraints,
        child_diet: bool = False,
        avoid: Iterable[str] = (),
        tracker: DiversityTracker | None = None,
        limits: DailyLimitTracker | None = None,
    ) -> Dish | None:
        used = set(avoid) | (tracker.exclusions("snack") if tracker else set())
        rec = self._fruits.recommend(
            target_calories,
            month,
            child=child_diet,
            diseases=constraints.diseases,
            allergies=constraints.allergies,
            exclude_names=used,
            accept=lambda dish: self._selector.allows(
                dish, constraints, limits.can_add if limits else None
            ),
        )
        if rec is None:
            return None
        dish = rec.as_dish()
        if limits:
            limits.add(dish)
        return dish
