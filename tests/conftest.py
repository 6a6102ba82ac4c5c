# tests/conftest.py
from __future__ import annotations

import pytest

from core.engine import DietEngine
from core.seasonal_fruits import FruitCatalog
from services.catalog import (
    FrameAllergenTable,
    FrameExclusionTable,
    FrameRecipeCatalog,
    InMemoryRecipeHistory,
    load_catalog_json,
)
from tests.helpers import SAMPLE_CATALOG, big_catalog_dishes


@pytest.fixture
def sample_lookups() -> tuple[FrameRecipeCatalog, FrameExclusionTable, FrameAllergenTable]:
    return load_catalog_json(SAMPLE_CATALOG)


@pytest.fixture
def sample_engine(sample_lookups) -> DietEngine:
    catalog, exclusions, allergens = sample_lookups
    return DietEngine.build(catalog, exclusions, InMemoryRecipeHistory(), allergens=allergens)


@pytest.fixture
def big_catalog() -> FrameRecipeCatalog:
    return FrameRecipeCatalog(big_catalog_dishes())


@pytest.fixture
def big_engine(big_catalog) -> DietEngine:
    return DietEngine.build(big_catalog, FrameExclusionTable([]), InMemoryRecipeHistory())


@pytest.fixture
def empty_engine() -> DietEngine:
    # fruits are emptied too: with the default fruit table every day still
    # gets a snack, so a recipe-less catalog alone never yields an absent day
    return DietEngine.build(
        FrameRecipeCatalog([]), FrameExclusionTable([]), InMemoryRecipeHistory(), fruits=FruitCatalog([])
    )


@pytest.fixture
def fruit_only_engine() -> DietEngine:
    return DietEngine.build(FrameRecipeCatalog([]), FrameExclusionTable([]), InMemoryRecipeHistory())
