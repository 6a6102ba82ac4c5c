"""
core/engine.py
────────────────────────────────────────────────────────────────────────
Wire the engine components together around the lookup services
(recipe catalog, disease exclusion table, recipe history and an
optional allergen table).
"""
from __future__ import annotations

from dataclasses import dataclass

from core.constraint_filter import ConstraintFilter
from core.dish_selector import DishSelector
from core.family_diet import FamilyDietUnifier
from core.meal_composer import MealComposer
from core.nutrition_calc import NutritionalCalculator
from core.personal_diet import PersonalDietGenerator
from core.policy import DietPolicy
from core.seasonal_fruits import FruitCatalog
from core.weekly_diet import WeeklyDietOrchestrator
from services.catalog import AllergenTable, DiseaseExclusionTable, RecipeCatalog, RecipeHistory


@dataclass
class DietEngine:
    calc: NutritionalCalculator
    constraint_filter: ConstraintFilter
    selector: DishSelector
    composer: MealComposer
    personal: PersonalDietGenerator
    family: FamilyDietUnifier
    weekly: WeeklyDietOrchestrator

    @classmethod
    def build(
        cls,
        catalog: RecipeCatalog,
        exclusions: DiseaseExclusionTable,
        history: RecipeHistory,
        fruits: FruitCatalog | None = None,
        policy: DietPolicy | None = None,
        allergens: AllergenTable | None = None,
    ) -> DietEngine:
        policy = policy or DietPolicy()
        calc = NutritionalCalculator(policy)
        constraint_filter = ConstraintFilter(exclusions, allergens)
        selector = DishSelector(catalog, constraint_filter, policy)
        composer = MealComposer(selector, fruits, policy)
        personal = PersonalDietGenerator(calc, constraint_filter, composer, history)
        family = FamilyDietUnifier(personal, calc, constraint_filter, history, policy)
        weekly = WeeklyDietOrchestrator(personal, family, catalog, policy)
        return cls(calc, constraint_filter, selector, composer, personal, family, weekly)
