from __future__ import annotations

from functools import lru_cache
from typing import Optional

from ..core.enums import Meal


@lru_cache(maxsize=256)
def resolve_eligible_meals(meals_text: Optional[str]) -> frozenset[Meal]:
    """Meals a plan entitles its students to.

    A meal is eligible when its name occurs anywhere in the lower-cased plan
    text, so "Breakfast, Lunch" and "breakfast+lunch" both resolve the same way.
    Abbreviations such as "B, L, D" are not expanded and resolve to no meals.
    """

    text = (meals_text or "").lower()
    return frozenset(meal for meal in Meal if meal.value in text)
