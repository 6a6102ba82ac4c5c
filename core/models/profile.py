from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict


class HealthProfile(BaseModel):
    """Health attributes that drive calorie and constraint computation."""

    age: int | None = None
    gender: str | None = None          # "male" | "female" | "other"
    height_cm: float | None = None
    weight_kg: float | None = None
    activity_level: str | None = None  # sedentary … very_active
    diseases: list[str] = []
    allergies: list[str] = []
    daily_calorie_goal: float | None = None

    model_config = ConfigDict(frozen=True)


class FamilyMember(BaseModel):
    id: str
    name: str = ""
    relationship: str = ""
    birth_date: date
    gender: str | None = None
    height_cm: float | None = None
    weight_kg: float | None = None
    activity_level: str | None = None
    diseases: list[str] = []
    allergies: list[str] = []
    daily_calorie_goal: float | None = None
    include_in_unified_diet: bool = True

    model_config = ConfigDict(frozen=True)

    def age_on(self, on: date) -> int:
        """Whole years between `birth_date` and `on`."""
        years = on.year - self.birth_date.year
        if (on.month, on.day) < (self.birth_date.month, self.birth_date.day):
            years -= 1
        return max(years, 0)

    def profile_on(self, on: date) -> HealthProfile:
        return HealthProfile(
            age=self.age_on(on),
            gender=self.gender,
            height_cm=self.height_cm,
            weight_kg=self.weight_kg,
            activity_level=self.activity_level,
            diseases=list(self.diseases),
            allergies=list(self.allergies),
            daily_calorie_goal=self.daily_calorie_goal,
        )
