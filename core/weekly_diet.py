"""
core/weekly_diet.py
────────────────────────────────────────────────────────────────────────
Seven-day orchestration.

Days are generated strictly in order: each day sees the diversity state
left by every previous day. Per day

  1. pick the preferred rice variety from the rotation,
  2. call the family unifier or the personal generator,
  3. fold the day's primary plan into the tracker.

A day with no plan is recorded as absent and the week carries on. The
shopping list and statistics are built once all seven days are done.
"""
from __future__ import annotations

import logging
import time
from datetime import date, timedelta
from typing import Literal

from pydantic import BaseModel

from core.diversity import DiversityTracker
from core.family_diet import FamilyDietUnifier
from core.models.plan import DailyDietPlan, FamilyDietPlan, WeekMetadata, WeeklyDiet
from core.models.profile import FamilyMember, HealthProfile
from core.personal_diet import PersonalDietGenerator
from core.policy import DietPolicy
from core.weekly_report import nutrition_stats, shopping_list
from services.catalog import RecipeCatalog

_LOG = logging.getLogger(__name__)

DAYS_PER_WEEK = 7


def this_monday(today: date) -> date:
    return today - timedelta(days=today.weekday())


def next_monday(today: date) -> date:
    return this_monday(today) + timedelta(days=DAYS_PER_WEEK)


class WeeklyDietOptions(BaseModel):
    user_id: str
    profile: HealthProfile
    week_start_date: date
    family_members: list[FamilyMember] = []
    diversity_level: Literal["high", "medium", "low"] = "medium"
    avoid_recent_recipes: bool = True
    existing_used_by_category: dict[str, list[str]] | None = None  # prior week, for regeneration

    @property
    def is_family(self) -> bool:
        return bool(self.family_members)


class WeeklyDietOrchestrator:
    def __init__(
        self,
        personal: PersonalDietGenerator,
        family: FamilyDietUnifier,
        catalog: RecipeCatalog,
        policy: DietPolicy | None = None,
    ) -> None:
        self._personal = personal
        self._family = family
        self._catalog = catalog
        self._policy = policy or DietPolicy()

    def generate(self, options: WeeklyDietOptions) -> WeeklyDiet:
        started = time.perf_counter()
        start = options.week_start_date
        if start.weekday() != 0:
            _LOG.warning("week start %s is a %s, not a Monday; generating from it anyway",
                         start, start.strftime("%A"))

        tracker = DiversityTracker(
            max_repeats=self._policy.max_repeats(options.diversity_level),
            seed_by_category=options.existing_used_by_category,
        )
        rotation = self._policy.rice_rotation
        rice_idx = 0

        dates = [start + timedelta(days=i) for i in range(DAYS_PER_WEEK)]
        daily_plans: dict[date, DailyDietPlan | FamilyDietPlan | None] = {}
        primary: dict[date, DailyDietPlan | None] = {}

        _LOG.info("weekly diet for %s from %s (%s, diversity=%s)",
                  options.user_id, start, "family" if options.is_family else "personal",
                  options.diversity_level)

        for i, day in enumerate(dates):
            preferred = rotation[rice_idx % len(rotation)] if rotation else None
            # history is only consulted on the first day; afterwards the tracker takes over
            avoid_recent = options.avoid_recent_recipes and i == 0

            if options.is_family:
                family_plan = self._family.generate(
                    options.user_id, options.profile, options.family_members, day,
                    tracker=tracker, preferred_rice=preferred, avoid_recent=avoid_recent,
                )
                plan = family_plan.primary_plan
                entry: DailyDietPlan | FamilyDietPlan | None = family_plan if plan else None
            else:
                plan = self._personal.generate(
                    options.user_id, options.profile, day,
                    tracker=tracker, preferred_rice=preferred, avoid_recent=avoid_recent,
                )
                entry = plan

            daily_plans[day] = entry
            primary[day] = plan
            if plan is None:
                _LOG.warning("day %s left absent: no plan could be generated", day)
                continue

            tracker.fold(plan)
            rice_idx += 1

        present = [p for p in primary.values() if p is not None]
        iso = start.isocalendar()
        metadata = WeekMetadata(
            user_id=options.user_id,
            week_start_date=start,
            week_year=iso[0],
            week_number=iso[1],
            is_family=options.is_family,
            total_recipes_count=len(tracker.used_titles),
            generation_duration_ms=int((time.perf_counter() - started) * 1000),
        )
        tracker.log_summary()
        if len(present) < DAYS_PER_WEEK:
            _LOG.warning("weekly diet incomplete: %d of %d days generated",
                         len(present), DAYS_PER_WEEK)

        return WeeklyDiet(
            metadata=metadata,
            daily_plans=daily_plans,
            shopping_list=shopping_list(present, self._catalog),
            nutrition_stats=nutrition_stats(dates, primary),
        )
