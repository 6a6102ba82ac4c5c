"""Re-export individual schema modules for easy imports."""

from .diet import (
    DiversityLevel,
    FamilyDietRequest,
    PersonalDietRequest,
    PersonalDietResponse,
    WeeklyDietRequest,
)

__all__ = [
    "DiversityLevel",
    "FamilyDietRequest",
    "PersonalDietRequest",
    "PersonalDietResponse",
    "WeeklyDietRequest",
]
