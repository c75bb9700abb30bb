from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import Meal


@dataclass(frozen=True)
class StudentRef:
    name: str
    roll_number: Optional[str] = None


@dataclass(frozen=True)
class MealSummary:
    meal: Meal
    students: tuple[StudentRef, ...]

    @property
    def count(self) -> int:
        return len(self.students)


@dataclass(frozen=True)
class AttendanceWindow:
    start: datetime
    end: datetime
    meals: list[MealSummary] = field(default_factory=list)

    @property
    def minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


@dataclass(frozen=True)
class TodayStats:
    total: int
    present: int
    percentage: int


@dataclass(frozen=True)
class MealStat:
    present: int
    eligible: int
