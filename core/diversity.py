"""
core/diversity.py
────────────────────────────────────────────────────────────────────────
Generation-time anti-repetition state for one weekly run.

The orchestrator owns one `DiversityTracker`, threads it through every
day's generation call and folds each finished day into it. Nothing here
is persisted.
"""
from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, Mapping

from core.models.plan import DailyDietPlan

_LOG = logging.getLogger(__name__)

CATEGORIES = ("rice", "side", "soup", "snack")


class DiversityTracker:
    def __init__(
        self,
        max_repeats: int = 1,
        seed_by_category: Mapping[str, Iterable[str]] | None = None,
    ) -> None:
        self.max_repeats = max_repeats
        self.used_titles: set[str] = set()
        self.frequency: Counter[str] = Counter()
        self.by_category: dict[str, set[str]] = {c: set() for c in CATEGORIES}
        # titles carried over from a previous week stay excluded all week
        self._seeded: dict[str, frozenset[str]] = {
            c: frozenset((seed_by_category or {}).get(c, ())) for c in CATEGORIES
        }
        for cat, titles in self._seeded.items():
            self.by_category[cat] |= titles

    def exclusions(self, category: str) -> set[str]:
        """Titles the selector should avoid for `category` (soft)."""
        capped = {
            t for t in self.by_category.get(category, ()) if self.frequency[t] >= self.max_repeats
        }
        return capped | self._seeded.get(category, frozenset())

    def record(self, category: str, title: str) -> None:
        self.used_titles.add(title)
        self.frequency[title] += 1
        self.by_category.setdefault(category, set()).add(title)

    def fold(self, plan: DailyDietPlan) -> None:
        for category, dish in plan.dishes():
            self.record(category, dish.title)

    def log_summary(self) -> None:
        counts = list(self.frequency.values())
        _LOG.info(
            "weekly diversity: %d distinct titles, %d used once, %d repeated",
            len(self.used_titles),
            sum(1 for c in counts if c == 1),
            sum(1 for c in counts if c > 1),
        )
        for cat in CATEGORIES:
            _LOG.info("  %s: %d titles", cat, len(self.by_category[cat]))
