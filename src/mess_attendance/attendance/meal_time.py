from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.constants import MEAL_GRACE_MINUTES, MEAL_SERVICE_WINDOWS
from ..core.enums import Meal


def current_meal(now: datetime, *, grace_minutes: int = MEAL_GRACE_MINUTES) -> Optional[Meal]:
    """Meal being served at ``now``, grace period included at both ends."""

    minutes = now.hour * 60 + now.minute
    for meal in Meal:
        start, end = MEAL_SERVICE_WINDOWS[meal.value]
        if start - grace_minutes <= minutes <= end + grace_minutes:
            return meal
    return None
