"""
core/policy.py
────────────────────────────────────────────────────────────────────────
Tunable nutrition-policy constants.

Every ratio, score base and rotation list used by the engine lives in
one `DietPolicy` object that is passed to the components that need it.
"""
from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field


class MealRatios(BaseModel):
    breakfast: float
    lunch: float
    dinner: float
    snack: float

    model_config = ConfigDict(frozen=True)


ADULT_RATIOS = MealRatios(breakfast=0.30, lunch=0.35, dinner=0.30, snack=0.05)
GROWTH_RATIOS = MealRatios(breakfast=0.25, lunch=0.35, dinner=0.30, snack=0.10)


class DietPolicy(BaseModel):
    # ─── daily split (4.1) ──────────────────────────────────────────
    adult_ratios: MealRatios = ADULT_RATIOS
    growth_ratios: MealRatios = GROWTH_RATIOS
    adult_age: int = 18
    calorie_floor: float = 800.0
    calorie_ceiling: float = 4000.0

    # ─── meal split (4.4) ───────────────────────────────────────────
    rice_ratio: float = 0.35
    sides_ratio: float = 0.45
    soup_ratio: float = 0.20
    side_count: int = 3

    # ─── scoring (4.3) ──────────────────────────────────────────────
    candidate_limit: int = Field(10, ge=10)
    score_base: float = 1000.0
    child_bonus_base: float = 100.0
    child_macro_targets: dict[str, float] = {"carbs": 0.50, "protein": 0.20, "fat": 0.30}

    # ─── weekly diversity (4.7) ─────────────────────────────────────
    rice_rotation: list[str] = ["white rice", "brown rice", "multigrain rice"]
    diversity_ceilings: dict[str, int] = {"high": 1, "medium": 2, "low": 3}

    # ─── unified-plan daily caps per disease (nutrient → amount) ────
    disease_daily_limits: dict[str, dict[str, float]] = {
        "diabetes": {"sugar": 50.0},
        "hypertension": {"sodium": 2000.0},
        "heart_disease": {"sodium": 1500.0},
        "hyperlipidemia": {"fat": 65.0},
        "kidney_disease": {"potassium": 2000.0, "phosphorus": 800.0},
        "gout": {"purine": 400.0},
    }

    model_config = ConfigDict(frozen=True)

    def max_repeats(self, diversity_level: str) -> int:
        try:
            return self.diversity_ceilings[diversity_level]
        except KeyError:
            raise ValueError(f"unknown diversity level: {diversity_level!r}") from None

    def daily_limits(self, diseases: Iterable[str]) -> dict[str, float]:
        """Strictest cap per nutrient over every disease that has one."""
        limits: dict[str, float] = {}
        for code in diseases:
            for nutrient, cap in self.disease_daily_limits.get(code, {}).items():
                limits[nutrient] = min(cap, limits.get(nutrient, cap))
        return limits

    @classmethod
    def from_settings(cls) -> DietPolicy:
        from config import settings

        return cls(candidate_limit=settings.candidate_limit)
