from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import Meal


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's meals for one day.

    ``record_id`` is None until the row has been persisted.
    """

    record_id: Optional[int]
    student_id: int
    attendance_date: date
    breakfast: bool
    lunch: bool
    dinner: bool
    updated_at: datetime
    scanned_at: Optional[datetime] = None

    @property
    def is_persisted(self) -> bool:
        return self.record_id is not None

    def has(self, meal: Meal) -> bool:
        return bool(getattr(self, meal.value))

    @property
    def marked_meals(self) -> frozenset[Meal]:
        return frozenset(m for m in Meal if self.has(m))


@dataclass(frozen=True)
class BulkMarkFailure:
    student_id: int
    message: str


@dataclass(frozen=True)
class BulkMarkResult:
    total: int
    succeeded: list[int] = field(default_factory=list)
    failed: list[BulkMarkFailure] = field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed

    @property
    def summary(self) -> str:
        return f"{len(self.succeeded)} of {self.total} succeeded"


@dataclass(frozen=True)
class QRMarkResult:
    meal: Meal
    record: AttendanceRecord
    already_marked: bool = False

    @property
    def message(self) -> str:
        if self.already_marked:
            return f"{self.meal.label} attendance already marked for today!"
        return "Attendance marked successfully!"
