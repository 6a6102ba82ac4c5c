"""
services/db.py
────────────────────────────────────────────────────────────────────────
* Async SQLAlchemy v2 setup
* Tables backing the read-only lookups (recipes + ingredients,
  disease exclusions, allergen-derived ingredients, diet history)
* Loaders that turn those tables into the in-memory lookups of
  `services/catalog.py`
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import AsyncGenerator

from sqlalchemy import JSON, Date, DateTime, Float, ForeignKey, Integer, String, Text, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncAttrs,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column, relationship, selectinload

from config import settings
from core.errors import (
    CatalogUnavailableError,
    ExclusionTableUnavailableError,
    HistoryUnavailableError,
)
from services.catalog import (
    FrameAllergenTable,
    FrameExclusionTable,
    FrameRecipeCatalog,
    InMemoryRecipeHistory,
)

_LOG = logging.getLogger(__name__)

# ───────── connection helper ────────────────────────────────────────
_ENGINE: AsyncEngine | None = None


async def _create_engine() -> AsyncEngine:
    if not settings.database_url:
        raise RuntimeError("Set DATABASE_URL to use the SQL lookups")
    return create_async_engine(settings.database_url, pool_pre_ping=True)


async def engine() -> AsyncEngine:
    global _ENGINE
    if _ENGINE is None:
        _ENGINE = await _create_engine()
    return _ENGINE


async def session_factory() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(await engine(), expire_on_commit=False)


# ───────── declarative base ──────────────────────────────────────────
Base = declarative_base(cls=AsyncAttrs)


class Recipe(Base):
    __tablename__ = "recipes"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String, unique=True)
    dish_type: Mapped[str | None] = mapped_column(String, index=True)
    meal_types: Mapped[list] = mapped_column(JSON, default=list)     # [] = any meal
    calories: Mapped[float] = mapped_column(Float, default=0.0)
    carbs: Mapped[float] = mapped_column(Float, default=0.0)
    protein: Mapped[float] = mapped_column(Float, default=0.0)
    fat: Mapped[float] = mapped_column(Float, default=0.0)
    sodium: Mapped[float] = mapped_column(Float, default=0.0)
    fiber: Mapped[float] = mapped_column(Float, default=0.0)
    sugar: Mapped[float] = mapped_column(Float, default=0.0)
    potassium: Mapped[float] = mapped_column(Float, default=0.0)
    phosphorus: Mapped[float] = mapped_column(Float, default=0.0)
    purine: Mapped[float] = mapped_column(Float, default=0.0)
    allergy_tags: Mapped[list] = mapped_column(JSON, default=list)
    keywords: Mapped[list] = mapped_column(JSON, default=list)
    description: Mapped[str | None] = mapped_column(Text)

    ingredients: Mapped[list[RecipeIngredient]] = relationship(
        back_populates="recipe", cascade="all, delete-orphan", order_by="RecipeIngredient.id"
    )


class RecipeIngredient(Base):
    __tablename__ = "recipe_ingredients"

    id: Mapped[int] = mapped_column(primary_key=True)
    recipe_id: Mapped[int] = mapped_column(ForeignKey("recipes.id"), index=True)
    name: Mapped[str] = mapped_column(String)
    quantity: Mapped[float] = mapped_column(Float, default=0.0)
    unit: Mapped[str] = mapped_column(String, default="")
    category: Mapped[str] = mapped_column(String, default="other")

    recipe: Mapped[Recipe] = relationship(back_populates="ingredients")


class DiseaseExcludedFood(Base):
    __tablename__ = "disease_excluded_foods"

    id: Mapped[int] = mapped_column(primary_key=True)
    disease_code: Mapped[str] = mapped_column(String, index=True)
    food_name: Mapped[str] = mapped_column(String)
    severity: Mapped[str] = mapped_column(String, default="moderate")
    excluded_type: Mapped[str] = mapped_column(String, default="ingredient")
    reason: Mapped[str | None] = mapped_column(Text)


class AllergenIngredient(Base):
    __tablename__ = "allergen_ingredients"

    id: Mapped[int] = mapped_column(primary_key=True)
    allergy_code: Mapped[str] = mapped_column(String, index=True)
    ingredient_name: Mapped[str] = mapped_column(String)


class DietHistory(Base):
    __tablename__ = "diet_history"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String, index=True)
    recipe_title: Mapped[str] = mapped_column(String)
    served_on: Mapped[date] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())


# ───────── loaders ───────────────────────────────────────────────────
def _recipe_record(r: Recipe) -> dict:
    return {
        "title": r.title,
        "dish_type": r.dish_type,
        "meal_types": r.meal_types or [],
        "nutrition": {
            "calories": r.calories, "carbs": r.carbs, "protein": r.protein,
            "fat": r.fat, "sodium": r.sodium, "fiber": r.fiber, "sugar": r.sugar,
            "potassium": r.potassium, "phosphorus": r.phosphorus, "purine": r.purine,
        },
        "ingredients": [
            {"name": i.name, "quantity": i.quantity, "unit": i.unit, "category": i.category}
            for i in r.ingredients
        ],
        "allergy_tags": r.allergy_tags or [],
        "keywords": r.keywords or [],
        "description": r.description or "",
    }


async def load_catalog(db: AsyncSession) -> FrameRecipeCatalog:
    try:
        rows = (
            await db.execute(
                select(Recipe).options(selectinload(Recipe.ingredients)).order_by(Recipe.id)
            )
        ).scalars().all()
    except SQLAlchemyError as exc:
        raise CatalogUnavailableError(f"recipe catalog query failed: {exc}") from exc
    _LOG.info("loaded %d recipes from the database", len(rows))
    return FrameRecipeCatalog.from_records(_recipe_record(r) for r in rows)


async def load_exclusions(db: AsyncSession) -> FrameExclusionTable:
    try:
        rows = (await db.execute(select(DiseaseExcludedFood))).scalars().all()
    except SQLAlchemyError as exc:
        raise ExclusionTableUnavailableError(f"exclusion table query failed: {exc}") from exc
    return FrameExclusionTable(
        {
            "disease_code": r.disease_code,
            "food_name": r.food_name,
            "severity": r.severity,
            "excluded_type": r.excluded_type,
            "reason": r.reason,
        }
        for r in rows
    )


async def load_allergens(db: AsyncSession) -> FrameAllergenTable:
    try:
        rows = (await db.execute(select(AllergenIngredient))).scalars().all()
    except SQLAlchemyError as exc:
        raise ExclusionTableUnavailableError(f"allergen table query failed: {exc}") from exc
    return FrameAllergenTable(
        {"allergy_code": r.allergy_code, "ingredient_name": r.ingredient_name} for r in rows
    )


async def load_recent_history(
    db: AsyncSession, days: int | None = None, today: date | None = None
) -> InMemoryRecipeHistory:
    """Titles served to each user in the last `days` days."""
    days = settings.recent_history_days if days is None else days
    since = (today or date.today()) - timedelta(days=days)
    try:
        rows = (
            await db.execute(
                select(DietHistory.user_id, DietHistory.recipe_title)
                .where(DietHistory.served_on >= since)
                .order_by(DietHistory.served_on.desc())
            )
        ).all()
    except SQLAlchemyError as exc:
        raise HistoryUnavailableError(f"diet history query failed: {exc}") from exc

    by_user: dict[str, list[str]] = {}
    for user_id, title in rows:
        titles = by_user.setdefault(user_id, [])
        if title not in titles:
            titles.append(title)
    return InMemoryRecipeHistory(by_user)


# ───────── session helper ────────────────────────────────────────────
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    factory = await session_factory()
    async with factory() as session:
        yield session
