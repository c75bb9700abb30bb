from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from typing import Any, Mapping, Optional

from ..core.constants import (
    ALLOWED_FREQUENCIES,
    DEFAULT_ACTIVE_HOURS,
    DEFAULT_FREQUENCY_MINUTES,
    DEFAULT_MAX_LOOKBACK_MINUTES,
)
from ..core.enums import Meal
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class HourRange:
    """Half-open ``[start, end)`` range of whole hours."""

    start: int
    end: int

    def contains(self, hour: int) -> bool:
        return self.start <= hour < self.end

    def overlaps(self, other: "HourRange") -> bool:
        return self.start < other.end and other.start < self.end


def _default_active_hours() -> dict[Meal, HourRange]:
    return {meal: HourRange(*DEFAULT_ACTIVE_HOURS[meal.value]) for meal in Meal}


@dataclass(frozen=True)
class NotificationConfig:
    enabled: bool = True
    frequency_minutes: int = DEFAULT_FREQUENCY_MINUTES
    active_hours: dict[Meal, HourRange] = field(default_factory=_default_active_hours)
    show_student_names: bool = True
    show_when_no_activity: bool = False
    max_lookback_minutes: int = DEFAULT_MAX_LOOKBACK_MINUTES

    def validate(self) -> "NotificationConfig":
        """Checked when settings are written; ticks trust what they read."""

        if self.frequency_minutes not in ALLOWED_FREQUENCIES:
            allowed = ", ".join(str(f) for f in ALLOWED_FREQUENCIES)
            raise ValidationError(f"Frequency must be one of {allowed} minutes")
        if self.max_lookback_minutes < self.frequency_minutes:
            raise ValidationError("Look-back limit cannot be shorter than the frequency")

        missing = [m.label for m in Meal if m not in self.active_hours]
        if missing:
            raise ValidationError(f"Active hours missing for {', '.join(missing)}")

        for meal in Meal:
            hours = self.active_hours[meal]
            if not (0 <= hours.start < hours.end <= 24):
                raise ValidationError(f"{meal.label} active hours must satisfy 0 <= start < end <= 24")

        meals = list(Meal)
        for i, meal in enumerate(meals):
            for other in meals[i + 1:]:
                if self.active_hours[meal].overlaps(self.active_hours[other]):
                    raise ValidationError(f"{meal.label} and {other.label} active hours overlap")
        return self

    def with_changes(self, **changes: Any) -> "NotificationConfig":
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["active_hours"] = {
            meal.value: {"start": hours.start, "end": hours.end} for meal, hours in self.active_hours.items()
        }
        return data

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "NotificationConfig":
        """Stored values merged over the defaults; unknown keys are ignored."""

        base = cls()
        if not data:
            return base

        active_hours = dict(base.active_hours)
        for key, value in (data.get("active_hours") or {}).items():
            try:
                meal = Meal(key)
            except ValueError:
                continue
            active_hours[meal] = HourRange(start=int(value["start"]), end=int(value["end"]))

        return cls(
            enabled=bool(data.get("enabled", base.enabled)),
            frequency_minutes=int(data.get("frequency_minutes", base.frequency_minutes)),
            active_hours=active_hours,
            show_student_names=bool(data.get("show_student_names", base.show_student_names)),
            show_when_no_activity=bool(data.get("show_when_no_activity", base.show_when_no_activity)),
            max_lookback_minutes=int(data.get("max_lookback_minutes", base.max_lookback_minutes)),
        )


@dataclass(frozen=True)
class NotificationMessage:
    title: str
    body: str

    @property
    def is_empty(self) -> bool:
        """The do-not-send sentinel."""
        return not self.title and not self.body


EMPTY_MESSAGE = NotificationMessage(title="", body="")


@dataclass(frozen=True)
class NotificationHistoryItem:
    notification_id: str
    title: str
    body: str
    timestamp: datetime
    window_start: Optional[str] = None
    window_end: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.notification_id,
            "title": self.title,
            "body": self.body,
            "timestamp": self.timestamp.isoformat(),
            "time_window": {"start": self.window_start, "end": self.window_end} if self.window_start else None,
        }
