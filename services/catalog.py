"""
services/catalog.py
────────────────────────────────────────────────────────────────────────
Read-only lookup services consumed by the diet engine:

* RecipeCatalog         – `search(...)` by dish-type / meal-type
* DiseaseExclusionTable – disease code → excluded foods
* AllergenTable         – ingredient name → allergy codes it implies
* RecipeHistory         – titles a user ate recently

The Frame* implementations keep their data in a pandas DataFrame, the
same shape the SQL loaders in `services/db.py` produce.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Protocol

import pandas as pd

from core.errors import CatalogUnavailableError
from core.models.dish import Dish, Ingredient
from core.models.exclusion import ExcludedFood

_LOG = logging.getLogger(__name__)

_RECIPE_COLUMNS = ["title", "dish_type", "meal_types"]
_EXCLUSION_COLUMNS = ["disease_code", "food_name", "severity", "excluded_type", "reason"]
_ALLERGEN_COLUMNS = ["allergy_code", "ingredient_name"]


# ───────────────────────────── protocols ──────────────────────────── #
class RecipeCatalog(Protocol):
    def search(
        self,
        dish_type: str | None = None,
        meal_type: str | None = None,
        exclude_titles: Iterable[str] = (),
        limit: int = 10,
        title_contains: str | None = None,
    ) -> list[Dish]: ...

    def ingredients_for(self, dish: Dish) -> list[Ingredient]: ...


class DiseaseExclusionTable(Protocol):
    def excluded_items(self, disease_codes: Iterable[str]) -> list[ExcludedFood]: ...


class AllergenTable(Protocol):
    def allergens_in(self, ingredient_names: Iterable[str]) -> set[str]: ...


class RecipeHistory(Protocol):
    def recently_used(self, user_id: str) -> list[str]: ...


# ───────────────────────────── recipes ────────────────────────────── #
class FrameRecipeCatalog:
    """Catalog backed by a DataFrame; row order is catalog order."""

    def __init__(self, dishes: Iterable[Dish]) -> None:
        self._dishes = list(dishes)
        self._frame = pd.DataFrame(
            [
                {"title": d.title, "dish_type": d.dish_type, "meal_types": list(d.meal_types)}
                for d in self._dishes
            ],
            columns=_RECIPE_COLUMNS,
        )
        self._by_title = {d.title: d for d in self._dishes}

    @classmethod
    def from_records(cls, records: Iterable[dict[str, Any]]) -> FrameRecipeCatalog:
        return cls(Dish.model_validate(r) for r in records)

    def __len__(self) -> int:
        return len(self._dishes)

    def search(
        self,
        dish_type: str | None = None,
        meal_type: str | None = None,
        exclude_titles: Iterable[str] = (),
        limit: int = 10,
        title_contains: str | None = None,
    ) -> list[Dish]:
        df = self._frame
        mask = pd.Series(True, index=df.index)

        if dish_type:
            mask &= df["dish_type"] == dish_type
        if meal_type:
            mask &= df["meal_types"].map(lambda mts: not mts or meal_type in mts).astype(bool)
        excluded = list(exclude_titles)
        if excluded:
            mask &= ~df["title"].isin(excluded)
        if title_contains:
            mask &= df["title"].str.lower().str.contains(title_contains.lower(), regex=False)

        hits = df[mask].head(limit)
        return [self._dishes[i] for i in hits.index]

    def ingredients_for(self, dish: Dish) -> list[Ingredient]:
        known = self._by_title.get(dish.title)
        return list((known or dish).ingredients)


# ───────────────────────────── exclusions ─────────────────────────── #
class FrameExclusionTable:
    def __init__(self, rows: Iterable[dict[str, Any]]) -> None:
        self._frame = pd.DataFrame(list(rows), columns=_EXCLUSION_COLUMNS)

    def excluded_items(self, disease_codes: Iterable[str]) -> list[ExcludedFood]:
        codes = list(disease_codes)
        if not codes:
            return []
        hits = self._frame[self._frame["disease_code"].isin(codes)]
        return [
            ExcludedFood.model_validate({k: v for k, v in row.items() if pd.notna(v)})
            for row in hits.to_dict("records")
        ]


# ───────────────────────────── allergens ──────────────────────────── #
class FrameAllergenTable:
    """Derived-ingredient rows, e.g. ``{"allergy_code": "soy", "ingredient_name": "tofu"}``."""

    def __init__(self, rows: Iterable[dict[str, Any]] = ()) -> None:
        frame = pd.DataFrame(list(rows), columns=_ALLERGEN_COLUMNS).dropna()
        frame = frame.assign(
            allergy_code=frame["allergy_code"].str.lower(),
            ingredient_name=frame["ingredient_name"].str.lower(),
        )
        self._codes: dict[str, set[str]] = (
            frame.groupby("ingredient_name")["allergy_code"].apply(set).to_dict()
        )

    def __len__(self) -> int:
        return sum(len(codes) for codes in self._codes.values())

    def allergens_in(self, ingredient_names: Iterable[str]) -> set[str]:
        out: set[str] = set()
        for name in ingredient_names:
            out |= self._codes.get(name.lower(), set())
        return out


# ───────────────────────────── history ────────────────────────────── #
class InMemoryRecipeHistory:
    def __init__(self, titles_by_user: dict[str, list[str]] | None = None) -> None:
        self._titles = titles_by_user or {}

    def recently_used(self, user_id: str) -> list[str]:
        return list(self._titles.get(user_id, []))


# ───────────────────────────── JSON loader ────────────────────────── #
def load_catalog_json(
    path: str | Path,
) -> tuple[FrameRecipeCatalog, FrameExclusionTable, FrameAllergenTable]:
    """
    Read a catalog file of the form
    ``{"recipes": [...], "excluded_foods": [...], "allergen_ingredients": [...]}``.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise CatalogUnavailableError(f"cannot read catalog {path}: {exc}") from exc

    catalog = FrameRecipeCatalog.from_records(data.get("recipes", []))
    exclusions = FrameExclusionTable(data.get("excluded_foods", []))
    allergens = FrameAllergenTable(data.get("allergen_ingredients", []))
    _LOG.info("loaded %d recipes and %d allergen links from %s", len(catalog), len(allergens), path)
    return catalog, exclusions, allergens
