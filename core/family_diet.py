"""
core/family_diet.py
────────────────────────────────────────────────────────────────────────
Family diet: one individual plan per person plus one shared plan.

The shared ("unified") plan is composed against

  • the union of every included person's diseases and allergies,
  • the average daily goal over the included head-count (primary user
    included),
  • growth-phase ratios when any included person is a minor,
  • the strictest per-disease daily nutrient caps (sugar, sodium,
    potassium, phosphorus, purine, fat),

and avoids the titles the individual plans of the same day already use.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Sequence

from core.constraint_filter import ConstraintFilter, DietConstraints
from core.daily_limits import DailyLimitTracker
from core.diversity import DiversityTracker
from core.models.plan import DailyDietPlan, FamilyDietPlan
from core.models.profile import FamilyMember, HealthProfile
from core.nutrition_calc import MealBudget, NutritionalCalculator
from core.personal_diet import PersonalDietGenerator
from core.policy import DietPolicy
from services.catalog import RecipeHistory

_LOG = logging.getLogger(__name__)

USER_KEY = "user"


class FamilyDietUnifier:
    def __init__(
        self,
        personal: PersonalDietGenerator,
        calc: NutritionalCalculator,
        constraint_filter: ConstraintFilter,
        history: RecipeHistory,
        policy: DietPolicy | None = None,
    ) -> None:
        self._personal = personal
        self._calc = calc
        self._filter = constraint_filter
        self._history = history
        self._policy = policy or DietPolicy()

    # ─────────────────────────────── inputs ───────────────────────── #
    @staticmethod
    def included_members(members: Sequence[FamilyMember]) -> list[FamilyMember]:
        return [m for m in members if m.include_in_unified_diet]

    def _unified_profiles(
        self, user_profile: HealthProfile, members: Sequence[FamilyMember], on: date
    ) -> list[HealthProfile]:
        return [user_profile, *(m.profile_on(on) for m in self.included_members(members))]

    def unified_budget(
        self, user_profile: HealthProfile, members: Sequence[FamilyMember], on: date
    ) -> MealBudget:
        profiles = self._unified_profiles(user_profile, members, on)
        goals = [self._calc.daily_calories(p) for p in profiles]
        average = sum(goals) / len(goals)
        growth = any(self._calc.is_minor(p.age) for p in profiles)
        _LOG.debug("unified target %.0f kcal over %d people%s",
                   average, len(goals), " [growth]" if growth else "")
        return self._calc.meal_budget(average, growth)

    def unified_constraints(
        self, user_profile: HealthProfile, members: Sequence[FamilyMember], on: date
    ) -> DietConstraints:
        profiles = self._unified_profiles(user_profile, members, on)
        diseases = {d for p in profiles for d in p.diseases}
        allergies = {a for p in profiles for a in p.allergies}
        return self._filter.constraints_for(diseases, allergies)

    # ─────────────────────────────── plans ────────────────────────── #
    def generate(
        self,
        user_id: str,
        user_profile: HealthProfile,
        members: Sequence[FamilyMember],
        target_date: date,
        tracker: DiversityTracker | None = None,
        preferred_rice: str | None = None,
        include_unified: bool = True,
        avoid_recent: bool = True,
    ) -> FamilyDietPlan:
        if any(m.id == USER_KEY for m in members):
            raise ValueError(f"family member id {USER_KEY!r} is reserved for the primary user")

        people = [(USER_KEY, user_profile)] + [(m.id, m.profile_on(target_date)) for m in members]
        individual: dict[str, DailyDietPlan] = {}
        for key, profile in people:
            plan = self._personal.generate(
                user_id, profile, target_date, tracker, preferred_rice, avoid_recent
            )
            if plan is None:
                _LOG.warning("no individual plan for %s on %s", key, target_date)
                continue
            individual[key] = plan

        unified = None
        if include_unified:
            taken = {dish.title for plan in individual.values() for _, dish in plan.dishes()}
            unified = self.generate_unified(
                user_id, user_profile, members, target_date,
                tracker, preferred_rice, avoid_recent, taken,
            )

        _LOG.info("family diet for %s: %d individual plans, unified=%s",
                  target_date, len(individual), unified is not None)
        return FamilyDietPlan(date=target_date, individual_plans=individual, unified_plan=unified)

    def generate_unified(
        self,
        user_id: str,
        user_profile: HealthProfile,
        members: Sequence[FamilyMember],
        target_date: date,
        tracker: DiversityTracker | None = None,
        preferred_rice: str | None = None,
        avoid_recent: bool = True,
        taken: set[str] | None = None,
    ) -> DailyDietPlan | None:
        budget = self.unified_budget(user_profile, members, target_date)
        constraints = self.unified_constraints(user_profile, members, target_date)
        avoid = set(taken or ())
        if avoid_recent:
            avoid.update(self._history.recently_used(user_id))
        _LOG.debug(
            "unified constraints: diseases=%s allergies=%s",
            sorted(constraints.diseases) or "-", sorted(constraints.allergies) or "-",
        )
        limits = DailyLimitTracker(self._policy.daily_limits(constraints.diseases))
        if limits:
            _LOG.debug("unified daily caps: %s", limits.limits)
        return self._personal.build_plan(
            target_date, budget, constraints, avoid, tracker, preferred_rice, limits or None
        )
