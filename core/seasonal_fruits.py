"""
core/seasonal_fruits.py
────────────────────────────────────────────────────────────────────────
Seasonal fruit snack recommender.

Not a scored search: filter the fruit catalog by month, drop fruits to
avoid for the active diseases or allergies, order kid-friendly first and
then by availability, and take the first one. Banana (year-round) and
then strawberry are the fallbacks when no seasonal fruit survives.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Literal

from pydantic import BaseModel, ConfigDict

from core.models.dish import Dish, Ingredient, Nutrition

_LOG = logging.getLogger(__name__)

_AVAILABILITY_ORDER = {"high": 0, "medium": 1, "low": 2}
_FALLBACK_IDS = ("banana", "strawberry")
MAX_SERVINGS = 3


class Fruit(BaseModel):
    id: str
    name: str
    season: list[int]                 # months 1–12
    serving_size: str
    nutrition: Nutrition              # per serving
    benefits: list[str] = []
    good_for_kids: bool = True
    kids_benefits: str | None = None
    availability: Literal["high", "medium", "low"] = "high"
    avoid_for_diseases: list[str] = []
    allergy_tags: list[str] = []

    model_config = ConfigDict(frozen=True)

    def as_dish(self, servings: int = 1, reason: str = "") -> Dish:
        return Dish(
            title=self.name,
            dish_type="snack",
            nutrition=self.nutrition.scaled(servings),
            ingredients=[Ingredient(name=self.name, quantity=servings, unit="serving", category="fruit")],
            allergy_tags=list(self.allergy_tags),
            description=reason,
            source="seasonal",
        )


def _fruit(id_, name, season, serving, kcal, protein, carbs, fat, fiber, benefits,
           kids, availability="high", avoid=(), allergy=()) -> Fruit:
    return Fruit(
        id=id_, name=name, season=list(season), serving_size=serving,
        nutrition=Nutrition(calories=kcal, protein=protein, carbs=carbs, fat=fat, fiber=fiber),
        benefits=list(benefits), kids_benefits=kids, availability=availability,
        avoid_for_diseases=list(avoid), allergy_tags=list(allergy),
    )


DEFAULT_FRUITS: list[Fruit] = [
    _fruit("strawberry", "strawberry", [3, 4, 5], "100g (about 7)", 32, 0.7, 7.7, 0.3, 2.0,
           ["rich in vitamin C", "antioxidant"],
           "Vitamin C supports immunity and helps iron absorption."),
    _fruit("cherry", "cherry", [5, 6], "100g (about 10)", 50, 1.0, 12.2, 0.3, 1.6,
           ["antioxidant", "sleep support"],
           "Melatonin helps sleep; antioxidants support immunity.",
           availability="medium", avoid=["diabetes"]),
    _fruit("watermelon", "watermelon", [6, 7, 8], "100g (one cup)", 30, 0.6, 7.6, 0.2, 0.4,
           ["hydration", "electrolyte balance"],
           "92% water, prevents dehydration in summer.", avoid=["diabetes"]),
    _fruit("peach", "peach", [7, 8], "100g (one medium)", 39, 0.9, 9.5, 0.3, 1.5,
           ["digestion", "skin health"],
           "Soft and sweet; vitamin A supports eyesight.", allergy=["peach"]),
    _fruit("melon", "melon", [6, 7, 8], "100g", 34, 0.8, 8.2, 0.2, 0.9,
           ["hydration", "rich in vitamin C"],
           "Potassium helps flush sodium.", avoid=["diabetes"]),
    _fruit("grape", "grape", [8, 9, 10], "100g (about 15)", 69, 0.7, 18.1, 0.2, 0.9,
           ["antioxidant", "heart health"],
           "Bite-sized quick energy for active kids.", avoid=["diabetes"]),
    _fruit("pear", "pear", [9, 10, 11], "100g (half)", 57, 0.4, 15.2, 0.1, 3.1,
           ["digestion", "airway health"],
           "Water and fibre aid digestion; soothes coughs."),
    _fruit("apple", "apple", [9, 10, 11, 12], "100g (half)", 52, 0.3, 13.8, 0.2, 2.4,
           ["digestion", "cholesterol control"],
           "Crunchy texture helps teeth; pectin supports gut health."),
    _fruit("persimmon", "persimmon", [10, 11], "100g (one medium)", 70, 0.6, 18.6, 0.2, 3.6,
           ["rich in vitamin A", "fatigue recovery"],
           "Vitamin A supports eyesight and growth.", avoid=["diabetes"]),
    _fruit("kiwi", "kiwi", [1, 2, 11, 12], "100g (1.5 medium)", 61, 1.1, 14.7, 0.5, 3.0,
           ["very rich in vitamin C", "digestion"],
           "Top vitamin C content among fruits.", allergy=["kiwi"]),
    _fruit("banana", "banana", range(1, 13), "1 medium (120g)", 105, 1.3, 27.0, 0.4, 3.1,
           ["energy", "blood pressure control"],
           "Carbohydrate-rich energy source for growing kids.", avoid=["diabetes"]),
]


@dataclass(frozen=True)
class FruitSnack:
    fruit: Fruit
    servings: int
    reason: str

    @property
    def nutrition(self) -> Nutrition:
        return self.fruit.nutrition.scaled(self.servings)

    @property
    def total_calories(self) -> float:
        return self.nutrition.calories

    def as_dish(self) -> Dish:
        return self.fruit.as_dish(self.servings, self.reason)


class FruitCatalog:
    def __init__(self, fruits: Iterable[Fruit] | None = None) -> None:
        self._fruits = list(DEFAULT_FRUITS if fruits is None else fruits)

    def seasonal(self, month: int) -> list[Fruit]:
        in_season = [f for f in self._fruits if month in f.season]
        return sorted(
            in_season,
            key=lambda f: (not f.good_for_kids, _AVAILABILITY_ORDER[f.availability]),
        )

    def recommend(
        self,
        target_calories: float,
        month: int,
        child: bool = False,
        diseases: Iterable[str] = (),
        allergies: Iterable[str] = (),
        exclude_names: Iterable[str] = (),
        accept: Callable[[Dish], bool] | None = None,
    ) -> FruitSnack | None:
        """`accept` is an extra safety check run on each fruit as a one-serving dish."""
        diseases = set(diseases)
        allergies = {a.lower() for a in allergies}

        def safe(f: Fruit) -> bool:
            if diseases & set(f.avoid_for_diseases):
                return False
            if allergies & {t.lower() for t in f.allergy_tags}:
                return False
            return accept is None or accept(f.as_dish())

        candidates = [f for f in self.seasonal(month) if safe(f)]
        if not candidates:
            by_id = {f.id: f for f in self._fruits}
            candidates = [by_id[i] for i in _FALLBACK_IDS if i in by_id and safe(by_id[i])][:1]
            _LOG.warning("no seasonal fruit for month %d; fallback %s",
                         month, candidates[0].name if candidates else "none")
        if not candidates:
            return None

        used = set(exclude_names)
        fresh = [f for f in candidates if f.name not in used]
        fruit = (fresh or candidates)[0]

        servings = self._servings(target_calories, fruit)
        reason = f"seasonal fruit for month {month}"
        if child and fruit.good_for_kids:
            reason += " (good for growing children)"
        if diseases:
            reason += f" (considering {', '.join(sorted(diseases))})"
        _LOG.debug("snack %s x%d (%.0f kcal)", fruit.name, servings, fruit.nutrition.calories * servings)
        return FruitSnack(fruit=fruit, servings=servings, reason=reason)

    @staticmethod
    def _servings(target_calories: float, fruit: Fruit) -> int:
        per = fruit.nutrition.calories
        if per <= 0:
            return 1
        return int(min(max(round(target_calories / per), 1), MAX_SERVINGS))
