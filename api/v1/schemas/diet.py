# api/v1/schemas/diet.py
from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

from core.models.plan import DailyDietPlan
from core.models.profile import FamilyMember, HealthProfile

DiversityLevel = Literal["high", "medium", "low"]


class PersonalDietRequest(BaseModel):
    user_id: str
    profile: HealthProfile
    target_date: date | None = None    # defaults to today
    avoid_recent: bool = True


class PersonalDietResponse(BaseModel):
    target_date: date
    target_calories: float
    plan: DailyDietPlan | None


class FamilyDietRequest(BaseModel):
    user_id: str
    profile: HealthProfile
    family_members: list[FamilyMember] = Field(default_factory=list)
    target_date: date | None = None
    include_unified: bool = True
    avoid_recent: bool = True


class WeeklyDietRequest(BaseModel):
    user_id: str
    profile: HealthProfile
    family_members: list[FamilyMember] = Field(default_factory=list)
    week_start_date: date | None = None   # defaults to next Monday
    diversity_level: DiversityLevel | None = None
    avoid_recent_recipes: bool = True
    existing_used_by_category: dict[str, list[str]] | None = None
