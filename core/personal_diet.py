"""
core/personal_diet.py
────────────────────────────────────────────────────────────────────────
One person, one day: allocate the daily budget, resolve the disease
exclusions once, read the recently-used titles, then compose breakfast,
lunch and dinner plus a fruit snack.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from core.constraint_filter import ConstraintFilter, DietConstraints
from core.daily_limits import DailyLimitTracker
from core.diversity import DiversityTracker
from core.meal_composer import MealComposer
from core.models.dish import MEAL_TYPES
from core.models.plan import DailyDietPlan
from core.models.profile import HealthProfile
from core.nutrition_calc import MealBudget, NutritionalCalculator
from services.catalog import RecipeHistory

_LOG = logging.getLogger(__name__)


class PersonalDietGenerator:
    def __init__(
        self,
        calc: NutritionalCalculator,
        constraint_filter: ConstraintFilter,
        composer: MealComposer,
        history: RecipeHistory,
    ) -> None:
        self._calc = calc
        self._filter = constraint_filter
        self._composer = composer
        self._history = history

    def generate(
        self,
        user_id: str,
        profile: HealthProfile,
        target_date: date,
        tracker: DiversityTracker | None = None,
        preferred_rice: str | None = None,
        avoid_recent: bool = True,
    ) -> DailyDietPlan | None:
        budget = self._calc.targets(profile)
        constraints = self._filter.constraints_for(profile.diseases, profile.allergies)
        recent = self._history.recently_used(user_id) if avoid_recent else []
        _LOG.debug(
            "personal diet %s on %s: %.0f kcal/day, %d recent titles%s",
            user_id, target_date, budget.daily, len(recent),
            " [growth]" if budget.growth_phase else "",
        )
        return self.build_plan(target_date, budget, constraints, recent, tracker, preferred_rice)

    def build_plan(
        self,
        target_date: date,
        budget: MealBudget,
        constraints: DietConstraints,
        avoid: Iterable[str] = (),
        tracker: DiversityTracker | None = None,
        preferred_rice: str | None = None,
        limits: DailyLimitTracker | None = None,
    ) -> DailyDietPlan | None:
        """Compose the four slots; None when every slot came back empty."""
        avoid = set(avoid)
        used_today: set[str] = set()
        meals = {}
        for meal_type in MEAL_TYPES:
            meal = self._composer.compose(
                meal_type,
                budget.for_meal(meal_type),
                constraints,
                child_diet=budget.growth_phase,
                avoid=avoid | used_today,
                tracker=tracker,
                preferred_rice=preferred_rice,
                limits=limits,
            )
            used_today.update(meal.composition_summary)
            meals[meal_type] = None if meal.is_empty else meal

        snack = self._composer.snack(
            budget.snack,
            target_date.month,
            constraints,
            child_diet=budget.growth_phase,
            avoid=avoid | used_today,
            tracker=tracker,
            limits=limits,
        )

        plan = DailyDietPlan(date=target_date, snack=snack, **meals)
        if plan.is_empty:
            _LOG.warning("no dish selected for any slot on %s", target_date)
            return None
        _LOG.info("diet for %s: %.0f kcal (target %.0f)",
                  target_date, plan.total_nutrition.calories, budget.daily)
        return plan
