from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict


class ExcludedFood(BaseModel):
    """One row of the disease exclusion table."""

    food_name: str
    severity: Literal["mild", "moderate", "severe"] = "moderate"
    excluded_type: Literal["ingredient", "recipe_keyword"] = "ingredient"
    disease_code: str | None = None
    reason: str | None = None

    model_config = ConfigDict(frozen=True)
