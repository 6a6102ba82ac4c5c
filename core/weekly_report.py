"""
core/weekly_report.py
────────────────────────────────────────────────────────────────────────
Post-week aggregation: the consolidated shopping list and the per-day
nutrition statistics.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Mapping

import pandas as pd

from core.models.plan import DailyDietPlan, ShoppingListItem, WeeklyNutritionStats
from services.catalog import RecipeCatalog

_LOG = logging.getLogger(__name__)


def shopping_list(plans: Iterable[DailyDietPlan], catalog: RecipeCatalog) -> list[ShoppingListItem]:
    """
    Merge every ingredient of every dish served in `plans`.

    Entries are keyed by (ingredient name, unit); quantities are summed
    and the distinct contributing dish titles collected. Output is
    ordered by category, then ingredient name.
    """
    rows = []
    for plan in plans:
        for _, dish in plan.dishes():
            for ing in catalog.ingredients_for(dish):
                rows.append(
                    {
                        "ingredient_name": ing.name.strip(),
                        "unit": ing.unit,
                        "category": ing.category,
                        "quantity": ing.quantity,
                        "recipe": dish.title,
                    }
                )
    if not rows:
        return []

    df = pd.DataFrame(rows)
    merged = (
        df.groupby(["ingredient_name", "unit"], sort=False)
        .agg(
            total_quantity=("quantity", "sum"),
            category=("category", "first"),
            recipes_using=("recipe", lambda s: sorted(set(s))),
        )
        .reset_index()
        .sort_values(["category", "ingredient_name"], kind="stable")
    )
    _LOG.debug("shopping list: %d ingredient lines merged into %d items", len(df), len(merged))
    return [
        ShoppingListItem(
            ingredient_name=r.ingredient_name,
            total_quantity=float(r.total_quantity),
            unit=r.unit,
            category=r.category,
            recipes_using=list(r.recipes_using),
        )
        for r in merged.itertuples(index=False)
    ]


def day_stats(day: date, plan: DailyDietPlan | None) -> WeeklyNutritionStats:
    if plan is None:
        return WeeklyNutritionStats(day_of_week=day.isoweekday(), date=day)
    total = plan.total_nutrition
    return WeeklyNutritionStats(
        day_of_week=day.isoweekday(),
        date=day,
        total_calories=total.calories,
        total_carbohydrates=total.carbs,
        total_protein=total.protein,
        total_fat=total.fat,
        total_sodium=total.sodium,
        meal_count=sum(1 for _ in plan.meals()),
    )


def nutrition_stats(
    dates: Iterable[date], plans: Mapping[date, DailyDietPlan | None]
) -> list[WeeklyNutritionStats]:
    """One entry per date; absent days report zeros."""
    return [day_stats(d, plans.get(d)) for d in dates]
