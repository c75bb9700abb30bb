from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from ..core.enums import Meal
from .eligibility import resolve_eligible_meals

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Plan:
    """Meal plan. Eligibility is resolved once, when the plan is loaded."""

    plan_id: int
    name: str
    meals_text: str
    eligible_meals: frozenset[Meal]

    @classmethod
    def from_text(cls, *, plan_id: int, name: str, meals_text: str) -> "Plan":
        eligible = resolve_eligible_meals(meals_text)
        if not eligible:
            logger.warning("Plan %s (%r) does not name any meal: %r", plan_id, name, meals_text)
        return cls(plan_id=plan_id, name=name, meals_text=meals_text, eligible_meals=eligible)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Plan":
        return cls.from_text(
            plan_id=int(row["plan_id"]),
            name=str(row.get("plan_name") or ""),
            meals_text=str(row.get("meals") or ""),
        )

    def includes(self, meal: Meal) -> bool:
        return meal in self.eligible_meals
