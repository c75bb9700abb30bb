from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import Meal
from ..plans.model import Plan


@dataclass(frozen=True)
class Student:
    student_id: int
    user_id: Optional[str]
    name: str
    roll_number: Optional[str]
    plan_id: Optional[int]
    is_active: bool
    join_date: date
    end_date: date

    def is_current(self, on: date) -> bool:
        """Active flag set and ``on`` inside the plan period (both ends inclusive)."""
        return self.is_active and self.join_date <= on <= self.end_date


@dataclass(frozen=True)
class StudentProfile:
    """Directory lookup result: a student together with their plan."""

    student: Student
    plan: Optional[Plan]

    @property
    def student_id(self) -> int:
        return self.student.student_id

    @property
    def eligible_meals(self) -> frozenset[Meal]:
        return self.plan.eligible_meals if self.plan else frozenset()

    def is_eligible(self, meal: Meal) -> bool:
        return meal in self.eligible_meals
