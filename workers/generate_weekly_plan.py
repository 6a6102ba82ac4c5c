"""
`python -m workers.generate_weekly_plan --request=request.json`

Reads a weekly request (user id, profile, optional family members) and
prints the generated week as JSON. Lookups come from the JSON catalog
unless `--db` is given.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from datetime import date
from pathlib import Path

from config import settings
from core.engine import DietEngine
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

_LOG = logging.getLogger(__name__)


async def _db_engine() -> DietEngine:
    factory = await session_factory()
    async with factory() as db:
        catalog = await load_catalog(db)
        exclusions = await load_exclusions(db)
        allergens = await load_allergens(db)
        history = await load_recent_history(db)
    return DietEngine.build(
        catalog, exclusions, history, policy=DietPolicy.from_settings(), allergens=allergens
    )


def _options(request: dict, start: date | None, diversity: str | None) -> WeeklyDietOptions:
    request = dict(request)
    if start:
        request["week_start_date"] = start
    request.setdefault("week_start_date", next_monday(date.today()))
    if diversity:
        request["diversity_level"] = diversity
    request.setdefault("diversity_level", settings.default_diversity_level)
    return WeeklyDietOptions.model_validate(request)


def _run(args: argparse.Namespace) -> None:
    request = json.loads(args.request.read_text(encoding="utf-8"))
    options = _options(request, args.start, args.diversity)

    if args.db:
        engine = asyncio.run(_db_engine())
    else:
        catalog, exclusions, allergens = load_catalog_json(args.catalog)
        engine = DietEngine.build(
            catalog, exclusions, InMemoryRecipeHistory(),
            policy=DietPolicy.from_settings(), allergens=allergens,
        )

    diet = engine.weekly.generate(options)
    out = diet.model_dump_json(indent=2)
    if args.out:
        args.out.write_text(out, encoding="utf-8")
        _LOG.info("wrote %s (%d days missing)", args.out, len(diet.missing_dates))
    else:
        print(out)


def main() -> None:
    ap = argparse.ArgumentParser(description="Generate a 7-day diet plan")
    ap.add_argument("--request", type=Path, required=True,
                    help="JSON with user_id, profile and optional family_members")
    ap.add_argument("--catalog", default=settings.catalog_path, help="JSON recipe catalog")
    ap.add_argument("--db", action="store_true", help="read lookups from DATABASE_URL instead")
    ap.add_argument("--start", type=date.fromisoformat, help="week start (YYYY-MM-DD)")
    ap.add_argument("--diversity", choices=["high", "medium", "low"])
    ap.add_argument("--out", type=Path, help="write JSON here instead of stdout")
    args = ap.parse_args()

    logging.basicConfig(level=settings.log_level.upper())
    _run(args)


if __name__ == "__main__":
    main()
