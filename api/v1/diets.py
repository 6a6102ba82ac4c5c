# api/v1/diets.py
from __future__ import annotations

import logging
from datetime import date
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, status

from config import settings
from core.engine import DietEngine
from core.models.plan import FamilyDietPlan, WeeklyDiet
from core.policy import DietPolicy
from core.weekly_diet import WeeklyDietOptions, next_monday
from services.catalog import InMemoryRecipeHistory, load_catalog_json
from services.db import (
    load_allergens,
    load_catalog,
    load_exclusions,
    load_recent_history,
    session_factory,
)
from api.v1.schemas import (
    FamilyDietRequest,
    PersonalDietRequest,
    PersonalDietResponse,
    WeeklyDietRequest,
)

_LOG = logging.getLogger(__name__)

router = APIRouter()


@lru_cache
def _json_engine(path: str) -> DietEngine:
    catalog, exclusions, allergens = load_catalog_json(path)
    return DietEngine.build(
        catalog, exclusions, InMemoryRecipeHistory(),
        policy=DietPolicy.from_settings(), allergens=allergens,
    )


async def get_engine() -> DietEngine:
    """SQL lookups when DATABASE_URL is set, otherwise the bundled JSON catalog."""
    if not settings.database_url:
        return _json_engine(settings.catalog_path)

    factory = await session_factory()
    async with factory() as db:
        catalog = await load_catalog(db)
        exclusions = await load_exclusions(db)
        allergens = await load_allergens(db)
        history = await load_recent_history(db)
    return DietEngine.build(
        catalog, exclusions, history, policy=DietPolicy.from_settings(), allergens=allergens
    )


@router.post("/personal", response_model=PersonalDietResponse)
def personal_diet(
    body: PersonalDietRequest,
    engine: DietEngine = Depends(get_engine),
) -> PersonalDietResponse:
    on = body.target_date or date.today()
    plan = engine.personal.generate(body.user_id, body.profile, on, avoid_recent=body.avoid_recent)
    return PersonalDietResponse(
        target_date=on,
        target_calories=engine.calc.daily_calories(body.profile),
        plan=plan,
    )


@router.post("/family", response_model=FamilyDietPlan)
def family_diet(
    body: FamilyDietRequest,
    engine: DietEngine = Depends(get_engine),
) -> FamilyDietPlan:
    on = body.target_date or date.today()
    try:
        return engine.family.generate(
            body.user_id,
            body.profile,
            body.family_members,
            on,
            include_unified=body.include_unified,
            avoid_recent=body.avoid_recent,
        )
    except ValueError as exc:
        raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc)) from exc


@router.post("/weekly", response_model=WeeklyDiet)
def weekly_diet(
    body: WeeklyDietRequest,
    engine: DietEngine = Depends(get_engine),
) -> WeeklyDiet:
    options = WeeklyDietOptions(
        user_id=body.user_id,
        profile=body.profile,
        week_start_date=body.week_start_date or next_monday(date.today()),
        family_members=body.family_members,
        diversity_level=body.diversity_level or settings.default_diversity_level,
        avoid_recent_recipes=body.avoid_recent_recipes,
        existing_used_by_category=body.existing_used_by_category,
    )
    try:
        diet = engine.weekly.generate(options)
    except ValueError as exc:
        raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc)) from exc
    if diet.missing_dates:
        _LOG.warning("weekly diet for %s missing %d days", body.user_id, len(diet.missing_dates))
    return diet
