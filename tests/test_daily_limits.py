# tests/test_daily_limits.py
from __future__ import annotations

from datetime import date

import pytest

from core.constraint_filter import ConstraintFilter
from core.daily_limits import DailyLimitTracker
from core.dish_selector import DishSelector
from core.meal_composer import MealComposer
from core.models.dish import Dish, Nutrition
from core.models.profile import FamilyMember, HealthProfile
from core.policy import DietPolicy
from services.catalog import FrameExclusionTable, FrameRecipeCatalog
from tests.helpers import MONDAY


def _dish(title: str, dish_type: str, kcal: float, **nutrients: float) -> Dish:
    return Dish(title=title, dish_type=dish_type, nutrition=Nutrition(calories=kcal, **nutrients))


# ── policy ──────────────────────────────────────────────────────────
def test_strictest_cap_wins_across_diseases():
    limits = DietPolicy().daily_limits(["hypertension", "heart_disease", "kidney_disease"])
    assert limits == {"sodium": 1500.0, "potassium": 2000.0, "phosphorus": 800.0}


def test_no_capped_disease_means_no_limits():
    assert DietPolicy().daily_limits(["obesity"]) == {}
    assert not DailyLimitTracker({})


# ── tracker ─────────────────────────────────────────────────────────
def test_tracker_rejects_dish_that_would_pass_the_cap():
    tracker = DailyLimitTracker({"sodium": 1000.0})
    stew = _dish("stew", "soup", 200, sodium=700)

    assert tracker.can_add(stew)
    tracker.add(stew)
    assert tracker.remaining() == {"sodium": 300.0}
    assert tracker.exceeded_by(stew) == "sodium"
    assert not tracker.can_add(stew)
    assert tracker.can_add(_dish("namul", "side", 50, sodium=300))


def test_uncapped_nutrients_are_ignored():
    tracker = DailyLimitTracker({"purine": 400.0})
    assert tracker.can_add(_dish("salty", "side", 100, sodium=5000, sugar=90))


# ── composition ─────────────────────────────────────────────────────
def test_composer_charges_each_pick_and_skips_over_cap_dishes():
    catalog = FrameRecipeCatalog(
        [
            _dish("rice", "rice", 350, sodium=10),
            _dish("salty side", "side", 150, sodium=900),
            _dish("mild side", "side", 140, sodium=200),
            _dish("plain side", "side", 130, sodium=100),
            _dish("salty soup", "soup", 200, sodium=800),
            _dish("clear soup", "soup", 150, sodium=250),
        ]
    )
    f = ConstraintFilter(FrameExclusionTable([]))
    composer = MealComposer(DishSelector(catalog, f))
    limits = DailyLimitTracker({"sodium": 1500.0})

    meal = composer.compose("lunch", 1000, f.constraints_for([], []), limits=limits)

    assert meal.rice.title == "rice"
    assert [s.title for s in meal.sides] == ["salty side", "mild side", "plain side"]
    # 1210 mg so far: the closer but saltier soup no longer fits
    assert meal.soup.title == "clear soup"
    assert limits.consumed["sodium"] == pytest.approx(1460)
    assert meal.total_nutrition.sodium == pytest.approx(1460)


# ── unified plan ────────────────────────────────────────────────────
def test_unified_plan_respects_hypertension_sodium_cap(sample_engine):
    user = HealthProfile(age=40, gender="female", daily_calorie_goal=1800)
    spouse = FamilyMember(
        id="spouse", birth_date=date(1982, 3, 1), daily_calorie_goal=2200, diseases=["hypertension"]
    )
    plan = sample_engine.family.generate("u1", user, [spouse], MONDAY)

    assert plan.unified_plan is not None
    assert plan.unified_plan.total_nutrition.sodium <= 2000


def test_personal_plans_are_not_capped(sample_engine):
    loose = sample_engine.personal.generate("u1", HealthProfile(age=40, daily_calorie_goal=2000), MONDAY)
    assert loose.total_nutrition.sodium > 2000
