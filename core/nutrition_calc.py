"""
core/nutrition_calc.py
────────────────────────────────────────────────────────────────────────
Calorie / meal-budget allocator:

1. BMR  (Harris–Benedict) for people aged 12+ with body metrics
2. Age-table calories for younger children or missing metrics
3. Activity multiplier + lowest applicable disease multiplier
4. Clamp to the policy range
5. Split the daily goal into breakfast / lunch / dinner / snack budgets
   (adult or growth-phase ratios, all-or-nothing per plan)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from core.models.profile import HealthProfile
from core.policy import DietPolicy

Logger = logging.getLogger(__name__)

ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
}
DEFAULT_ACTIVITY = "sedentary"
DEFAULT_AGE = 30

DISEASE_CALORIE_MULTIPLIERS: dict[str, float] = {
    "diabetes": 0.85,
    "hypertension": 1.0,     # sodium only
    "gout": 0.9,
    "kidney_disease": 0.9,
    "hyperlipidemia": 0.85,
    "obesity": 0.8,
    "heart_disease": 0.9,
}

# (upper age bound inclusive, male kcal, female kcal)
_AGE_TABLE: list[tuple[int, int, int]] = [
    (2, 1000, 1000),
    (5, 1400, 1400),
    (8, 1700, 1500),
    (11, 2100, 1800),
    (14, 2500, 2000),
    (18, 2700, 2000),
    (29, 2600, 2100),
    (49, 2400, 1900),
    (64, 2200, 1800),
]
_AGE_TABLE_65_PLUS = (2000, 1600)


# ──────────────────────────────────────────────────────────────────────
#  Budget dataclass
# ──────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class MealBudget:
    daily: float
    breakfast: float
    lunch: float
    dinner: float
    snack: float
    growth_phase: bool = False

    def for_meal(self, meal_type: str) -> float:
        return getattr(self, meal_type)


# ──────────────────────────────────────────────────────────────────────
#  Calculator
# ──────────────────────────────────────────────────────────────────────
class NutritionalCalculator:
    """Source-of-truth for daily kcal goals and per-meal budgets."""

    def __init__(self, policy: DietPolicy | None = None) -> None:
        self._policy = policy or DietPolicy()

    # --------------- BMR / activity ---------------------------------
    def bmr(self, gender: str | None, weight_kg: float, height_cm: float, age: int) -> float:
        if (gender or "").lower() == "male":
            return 88.362 + 13.397 * weight_kg + 4.799 * height_cm - 5.677 * age
        # female and unspecified share the second equation
        return 447.593 + 9.247 * weight_kg + 3.098 * height_cm - 4.33 * age

    def activity_factor(self, level: str | None) -> float:
        if level not in ACTIVITY_MULTIPLIERS:
            if level:
                Logger.debug("unknown activity level %r → %s", level, DEFAULT_ACTIVITY)
            level = DEFAULT_ACTIVITY
        return ACTIVITY_MULTIPLIERS[level]

    def age_table_calories(self, age: int, gender: str | None) -> float:
        male = (gender or "").lower() == "male"
        for upper, m_kcal, f_kcal in _AGE_TABLE:
            if age <= upper:
                return float(m_kcal if male else f_kcal)
        m_kcal, f_kcal = _AGE_TABLE_65_PLUS
        return float(m_kcal if male else f_kcal)

    def disease_multiplier(self, diseases: Iterable[str]) -> float:
        return min(
            (DISEASE_CALORIE_MULTIPLIERS[d] for d in diseases if d in DISEASE_CALORIE_MULTIPLIERS),
            default=1.0,
        )

    # --------------- Calories ---------------------------------------
    def daily_calories(self, p: HealthProfile) -> float:
        """Daily kcal goal; an explicit goal on the profile wins."""
        if p.daily_calorie_goal:
            return float(p.daily_calorie_goal)

        age = p.age if p.age is not None else DEFAULT_AGE
        factor = self.activity_factor(p.activity_level)

        if age >= 12 and p.weight_kg and p.height_cm:
            kcal = self.bmr(p.gender, p.weight_kg, p.height_cm, age) * factor
        else:
            # mild activity adjustment (1.0 … ~1.1) on top of the table
            kcal = self.age_table_calories(age, p.gender) * ((factor - 1.2) * 0.15 + 1)

        kcal *= self.disease_multiplier(p.diseases)
        return round(self._clamp(kcal))

    def _clamp(self, kcal: float) -> float:
        return min(max(kcal, self._policy.calorie_floor), self._policy.calorie_ceiling)

    # --------------- Budgets ----------------------------------------
    def meal_budget(self, daily_kcal: float, growth_phase: bool) -> MealBudget:
        ratios = self._policy.growth_ratios if growth_phase else self._policy.adult_ratios
        return MealBudget(
            daily=daily_kcal,
            breakfast=daily_kcal * ratios.breakfast,
            lunch=daily_kcal * ratios.lunch,
            dinner=daily_kcal * ratios.dinner,
            snack=daily_kcal * ratios.snack,
            growth_phase=growth_phase,
        )

    def is_minor(self, age: int | None) -> bool:
        return age is not None and age < self._policy.adult_age

    def targets(self, p: HealthProfile) -> MealBudget:
        """Daily goal + budgets for a single person."""
        return self.meal_budget(self.daily_calories(p), self.is_minor(p.age))
