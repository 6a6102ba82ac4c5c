"""
core/daily_limits.py
────────────────────────────────────────────────────────────────────────
Per-day nutrient caps for the shared family plan.

Some diseases put a ceiling on one nutrient for the whole day (sugar for
diabetes, sodium for hypertension and heart disease, potassium and
phosphorus for kidney disease, purine for gout). The tracker starts
from the strictest cap per nutrient, accumulates every dish that goes
into the plan and rejects a candidate that would push any running total
past its cap.
"""
from __future__ import annotations

import logging
from typing import Mapping

from core.models.dish import Dish

_LOG = logging.getLogger(__name__)


class DailyLimitTracker:
    def __init__(self, limits: Mapping[str, float]) -> None:
        self.limits = dict(limits)
        self.consumed: dict[str, float] = {k: 0.0 for k in self.limits}

    def __bool__(self) -> bool:
        return bool(self.limits)

    def remaining(self) -> dict[str, float]:
        return {k: max(0.0, cap - self.consumed[k]) for k, cap in self.limits.items()}

    def exceeded_by(self, dish: Dish) -> str | None:
        """Name of the first nutrient `dish` would push over its cap, else None."""
        for nutrient, cap in self.limits.items():
            total = self.consumed[nutrient] + getattr(dish.nutrition, nutrient)
            if total > cap:
                return nutrient
        return None

    def can_add(self, dish: Dish) -> bool:
        nutrient = self.exceeded_by(dish)
        if nutrient:
            _LOG.debug(
                "excluded %s: daily %s cap %.0f (%.0f left)",
                dish.title, nutrient, self.limits[nutrient], self.remaining()[nutrient],
            )
            return False
        return True

    def add(self, dish: Dish) -> None:
        for nutrient in self.limits:
            self.consumed[nutrient] += getattr(dish.nutrition, nutrient)
