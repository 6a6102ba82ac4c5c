"""
core/constraint_filter.py
────────────────────────────────────────────────────────────────────────
Disease + allergy safety filter.

Two independent checks, both must pass:

1. Disease exclusion – disease codes resolve (via the exclusion table)
   to excluded ingredient names / recipe keywords; a dish whose
   ingredients or keywords hit that set is rejected.
2. Allergy compatibility – any overlap between the declared allergy
   codes and the dish's derived allergy tags rejects the dish. Derived
   tags are the catalog's explicit `allergy_tags`, the codes the
   allergen table links to the dish's ingredients, and any allergy code
   that appears as a word of an ingredient name ("peanut" in "peanut
   butter").

Filtering never mutates the catalog. Resolved exclusion sets are
memoised per disease-code set for the lifetime of the filter.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from core.models.dish import Dish
from core.models.exclusion import ExcludedFood
from services.catalog import AllergenTable, DiseaseExclusionTable, FrameAllergenTable

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExclusionSet:
    ingredients: frozenset[str] = frozenset()
    keywords: frozenset[str] = frozenset()
    reasons: dict[str, str] = field(default_factory=dict, compare=False, hash=False)

    def __bool__(self) -> bool:
        return bool(self.ingredients or self.keywords)


@dataclass(frozen=True)
class DietConstraints:
    """Everything a candidate dish has to respect for one plan."""

    diseases: frozenset[str] = frozenset()
    allergies: frozenset[str] = frozenset()
    excluded: ExclusionSet = ExclusionSet()


class ConstraintFilter:
    def __init__(
        self,
        exclusion_table: DiseaseExclusionTable,
        allergen_table: AllergenTable | None = None,
    ) -> None:
        self._table = exclusion_table
        self._allergens = allergen_table or FrameAllergenTable()
        self._cache: dict[frozenset[str], ExclusionSet] = {}

    # ─────────────────────────────── resolve ──────────────────────── #
    def resolve(self, disease_codes: Iterable[str]) -> ExclusionSet:
        key = frozenset(disease_codes)
        if not key:
            return ExclusionSet()
        if key not in self._cache:
            self._cache[key] = _to_exclusion_set(self._table.excluded_items(sorted(key)))
            _LOG.debug(
                "resolved %d diseases → %d excluded foods",
                len(key), len(self._cache[key].ingredients) + len(self._cache[key].keywords),
            )
        return self._cache[key]

    def constraints_for(self, diseases: Iterable[str], allergies: Iterable[str]) -> DietConstraints:
        diseases = frozenset(diseases)
        return DietConstraints(
            diseases=diseases,
            allergies=frozenset(a.lower() for a in allergies),
            excluded=self.resolve(diseases),
        )

    # ─────────────────────────────── checks ───────────────────────── #
    def disease_violation(self, dish: Dish, excluded: ExclusionSet) -> str | None:
        if not excluded:
            return None
        tags = dish.ingredient_names() | {k.lower() for k in dish.keywords}
        hit = tags & excluded.ingredients
        if hit:
            name = sorted(hit)[0]
            return excluded.reasons.get(name, f"contains {name}")
        text = " ".join([dish.title, *dish.keywords]).lower()
        for kw in sorted(excluded.keywords):
            if kw in text:
                return excluded.reasons.get(kw, f"keyword {kw}")
        return None

    def allergy_tags(self, dish: Dish, allergies: Iterable[str] = ()) -> set[str]:
        names = dish.ingredient_names()
        tags = {t.lower() for t in dish.allergy_tags} | self._allergens.allergens_in(names)
        words = {w for name in names for w in name.replace("-", " ").split()}
        return tags | (set(allergies) & (names | words))

    def allergy_violation(self, dish: Dish, allergies: frozenset[str]) -> str | None:
        if not allergies:
            return None
        hit = self.allergy_tags(dish, allergies) & allergies
        if hit:
            return "allergen " + ", ".join(sorted(hit))
        return None

    def is_allowed(self, dish: Dish, constraints: DietConstraints) -> bool:
        reason = self.disease_violation(dish, constraints.excluded) or self.allergy_violation(
            dish, constraints.allergies
        )
        if reason:
            _LOG.debug("excluded %s: %s", dish.title, reason)
            return False
        return True

    def filter(self, dishes: Iterable[Dish], constraints: DietConstraints) -> list[Dish]:
        """Safe subset of `dishes`, catalog order preserved."""
        return [d for d in dishes if self.is_allowed(d, constraints)]


def _to_exclusion_set(rows: list[ExcludedFood]) -> ExclusionSet:
    ingredients: set[str] = set()
    keywords: set[str] = set()
    reasons: dict[str, str] = {}
    for row in rows:
        name = row.food_name.lower()
        (keywords if row.excluded_type == "recipe_keyword" else ingredients).add(name)
        reasons[name] = row.reason or f"{row.food_name} ({row.severity}, {row.disease_code or 'disease'})"
    return ExclusionSet(frozenset(ingredients), frozenset(keywords), reasons)
