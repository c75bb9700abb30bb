from __future__ import annotations

from typing import Any, Mapping

from ..core.enums import Meal
from ..core.exceptions import ValidationError


def parse_meal(value: Any) -> Meal:
    try:
        return Meal(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown meal: {value!r}") from None


def parse_meal_flags(raw: Mapping[str, Any]) -> dict[Meal, bool]:
    """Pick the meal keys present in a request payload.

    Absent keys stay absent so the update remains partial.
    """

    flags: dict[Meal, bool] = {}
    for meal in Meal:
        if meal.value not in raw or raw[meal.value] is None:
            continue
        value = raw[meal.value]
        if not isinstance(value, bool):
            raise ValidationError(f"{meal.label} must be true or false")
        flags[meal] = value
    return flags
