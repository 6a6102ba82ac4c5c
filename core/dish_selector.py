"""
core/dish_selector.py
────────────────────────────────────────────────────────────────────────
Pick the single best dish for one meal slot.

Responsibilities
----------------
1.   `candidates()` – up to N safe dishes in catalog order: the catalog
     is searched page by page (≤ N rows each, excluded titles left out)
     and every page goes through the disease/allergy filter until N
     dishes survive or the catalog runs dry.
2.   `score_candidates()` – calorie closeness, plus a macro-ratio bonus
     for child diets:

         score = (1000 − |kcal − target|)
               + (100 − 100 · Σ|ratio − target_ratio|)   # child only

3.   `select()` – stable sort on score (ties keep catalog order) and
     return the top row, or None.

Exclusions come in three strengths, relaxed in this order:

* *avoid* titles (used earlier today, taken by a family member's plan,
  recent history) are dropped first;
* *ceiling* titles (at the weekly diversity ceiling, or carried over
  from last week) are dropped next, with the avoid titles back in
  force, and only then both together;
* *hard* titles (already in this meal) are never returned.

So a small catalog repeats rather than empties, and when it has to
repeat it prefers a dish used earlier today over one already at its
weekly ceiling.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterable

import numpy as np
import pandas as pd

from core.constraint_filter import ConstraintFilter, DietConstraints
from core.models.dish import Dish
from core.policy import DietPolicy
from services.catalog import RecipeCatalog

_LOG = logging.getLogger(__name__)

_MACROS = ["carbs", "protein", "fat"]


class DishSelector:
    def __init__(
        self,
        catalog: RecipeCatalog,
        constraint_filter: ConstraintFilter,
        policy: DietPolicy | None = None,
    ) -> None:
        self._catalog = catalog
        self._filter = constraint_filter
        self._policy = policy or DietPolicy()

    # ─────────────────────────────── filter ───────────────────────── #
    def candidates(
        self,
        dish_type: str,
        meal_type: str | None,
        constraints: DietConstraints,
        exclude_titles: Iterable[str] = (),
        title_contains: str | None = None,
        accept: Callable[[Dish], bool] | None = None,
    ) -> list[Dish]:
        limit = self._policy.candidate_limit
        seen = set(exclude_titles)
        safe: list[Dish] = []
        while len(safe) < limit:
            page = self._catalog.search(
                dish_type=dish_type,
                meal_type=meal_type,
                exclude_titles=seen,
                limit=limit,
                title_contains=title_contains,
            )
            page = [d for d in page if d.title not in seen]
            if not page:
                break
            seen.update(d.title for d in page)
            safe.extend(d for d in self._filter.filter(page, constraints) if self._accepts(d, accept))
        return safe[:limit]

    def allows(
        self, dish: Dish, constraints: DietConstraints, accept: Callable[[Dish], bool] | None = None
    ) -> bool:
        return self._filter.is_allowed(dish, constraints) and self._accepts(dish, accept)

    @staticmethod
    def _accepts(dish: Dish, accept: Callable[[Dish], bool] | None) -> bool:
        return accept is None or accept(dish)

    # ──────────────────────────── scoring ─────────────────────────── #
    def score_candidates(
        self, dishes: list[Dish], target_calories: float, child_diet: bool = False
    ) -> pd.DataFrame:
        """One row per dish (same order) with a `score` column; higher is better."""
        df = pd.DataFrame(
            [
                {
                    "title": d.title,
                    "calories": d.nutrition.calories,
                    "carbs": d.nutrition.carbs,
                    "protein": d.nutrition.protein,
                    "fat": d.nutrition.fat,
                }
                for d in dishes
            ],
            columns=["title", "calories", *_MACROS],
        )
        score = self._policy.score_base - np.abs(df["calories"].astype(float) - target_calories)

        if child_diet:
            mass = df[_MACROS].astype(float).sum(axis=1)
            safe = mass.where(mass > 0)
            diff = sum(
                (df[k].astype(float) / safe - t).abs()
                for k, t in self._policy.child_macro_targets.items()
            )
            base = self._policy.child_bonus_base
            score = score + (base - base * diff).fillna(0.0)

        return df.assign(score=score)

    # ──────────────────────────── wrapper ─────────────────────────── #
    def select(
        self,
        dish_type: str,
        meal_type: str | None,
        target_calories: float,
        constraints: DietConstraints,
        exclude_titles: Iterable[str] = (),
        child_diet: bool = False,
        soft_exclude: Iterable[str] = (),
        prefer_title: str | None = None,
        ceiling_exclude: Iterable[str] = (),
        accept: Callable[[Dish], bool] | None = None,
    ) -> Dish | None:
        """
        `soft_exclude` is relaxed first, then `ceiling_exclude` (with
        `soft_exclude` back in force), then both; `exclude_titles` always
        holds. `accept` is an extra per-dish veto applied with the
        constraint filter.
        """
        hard = set(exclude_titles)
        ceiling = set(ceiling_exclude) - hard
        avoid = set(soft_exclude) - hard
        strictest = hard | ceiling | avoid

        survivors: list[Dish] = []
        for excluded, prefer in _attempts(hard, ceiling, avoid, prefer_title):
            survivors = self.candidates(dish_type, meal_type, constraints, excluded, prefer, accept)
            if survivors:
                if excluded != strictest:
                    dropped = [
                        name for name, titles in (("avoid list", avoid), ("weekly ceiling", ceiling))
                        if not titles <= excluded
                    ]
                    _LOG.info("diversity relaxed for %s/%s (%s)", meal_type, dish_type, " + ".join(dropped))
                break

        if not survivors:
            _LOG.warning(
                "no %s candidate for %s (target %.0f kcal)", dish_type, meal_type, target_calories
            )
            return None

        scored = self.score_candidates(survivors, target_calories, child_diet)
        ranked = scored.sort_values("score", ascending=False, kind="stable")
        best = survivors[ranked.index[0]]
        _LOG.debug(
            "selected %s for %s/%s: %.0f kcal, score %.1f%s",
            best.title, meal_type, dish_type, best.nutrition.calories,
            ranked["score"].iloc[0], " [child]" if child_diet else "",
        )
        return best


def _attempts(
    hard: set[str], ceiling: set[str], avoid: set[str], prefer: str | None
) -> list[tuple[set[str], str | None]]:
    """Search passes from strictest to loosest."""
    prefs = [prefer, None] if prefer else [None]
    tiers: list[set[str]] = []
    for excluded in (hard | ceiling | avoid, hard | ceiling, hard | avoid, hard):
        if excluded not in tiers:
            tiers.append(excluded)
    return [(excluded, p) for excluded in tiers for p in prefs]
