"""
Load a JSON recipe catalog into the `recipes`, `recipe_ingredients`,
`disease_excluded_foods` and `allergen_ingredients` tables.

Usage
-----

    # bundled sample catalog
    python -m scripts.seed_recipes

    # custom file (same schema: {"recipes": [...], "excluded_foods": [...],
    #               "allergen_ingredients": [...]})
    python -m scripts.seed_recipes --file path/to/catalog.json --create-tables
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from config import settings
from services.db import (
    AllergenIngredient,
    Base,
    DiseaseExcludedFood,
    Recipe,
    RecipeIngredient,
    engine,
    session_factory,
)


def _recipe_row(r: dict[str, Any]) -> Recipe:
    nut = r.get("nutrition", {})
    return Recipe(
        title=r["title"],
        dish_type=r.get("dish_type"),
        meal_types=r.get("meal_types", []),
        calories=nut.get("calories", 0.0),
        carbs=nut.get("carbs", 0.0),
        protein=nut.get("protein", 0.0),
        fat=nut.get("fat", 0.0),
        sodium=nut.get("sodium", 0.0),
        fiber=nut.get("fiber", 0.0),
        sugar=nut.get("sugar", 0.0),
        potassium=nut.get("potassium", 0.0),
        phosphorus=nut.get("phosphorus", 0.0),
        purine=nut.get("purine", 0.0),
        allergy_tags=r.get("allergy_tags", []),
        keywords=r.get("keywords", []),
        description=r.get("description"),
        ingredients=[RecipeIngredient(**i) for i in r.get("ingredients", [])],
    )


async def _seed(data: dict[str, Any], create_tables: bool) -> None:
    if create_tables:
        async with (await engine()).begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    recipes = data.get("recipes", [])
    excluded = data.get("excluded_foods", [])
    allergens = data.get("allergen_ingredients", [])
    factory = await session_factory()
    async with factory() as db:
        db.add_all(_recipe_row(r) for r in recipes)
        db.add_all(DiseaseExcludedFood(**row) for row in excluded)
        db.add_all(AllergenIngredient(**row) for row in allergens)
        await db.commit()
    print(f"✓ inserted {len(recipes)} recipes, {len(excluded)} excluded foods and {len(allergens)} allergen links")


def _load_json(path: Path) -> dict[str, Any]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict) or "recipes" not in data:
        raise ValueError("JSON file must be an object with a 'recipes' list")
    return data


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--file",
        type=Path,
        default=Path(settings.catalog_path),
        help="JSON catalog to load (defaults to CATALOG_PATH)",
    )
    parser.add_argument("--create-tables", action="store_true", help="run CREATE TABLE first")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level.upper())
    asyncio.run(_seed(_load_json(args.file), args.create_tables))


if __name__ == "__main__":
    main()
