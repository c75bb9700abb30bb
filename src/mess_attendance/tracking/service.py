from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import Clock, SystemClock
from ..core.enums import Meal
from ..core.exceptions import ValidationError
from ..attendance.repository import AttendanceRepository
from ..students.repository import StudentDirectory
from .model import AttendanceWindow, MealStat, MealSummary, StudentRef, TodayStats


def percentage_of(part: int, whole: int) -> int:
    """Whole-number percentage rounded half up; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return (part * 200 + whole) // (2 * whole)


class WindowAggregator:
    """Groups attendance rows updated inside a time window by meal."""

    def __init__(self, attendance: AttendanceRepository, directory: StudentDirectory):
        self._attendance = attendance
        self._directory = directory

    async def aggregate(self, start: datetime, end: datetime, *, exclusive_start: bool = False) -> AttendanceWindow:
        """Rows with ``start <= updated_at <= end``.

        ``exclusive_start`` drops rows stamped exactly at ``start``, for a window
        that continues where the previous one ended.
        """

        if start > end:
            raise ValidationError("Window start must not be after its end")

        # Rows are looked up by the day containing ``end``, even if the window crosses midnight.
        records = await self._attendance.list_for_date(end.date(), updated_from=start, updated_to=end)
        if exclusive_start:
            records = [r for r in records if r.updated_at > start]
        profiles = await self._directory.get_profiles(r.student_id for r in records)

        grouped: dict[Meal, dict[int, StudentRef]] = {meal: {} for meal in Meal}
        for record in records:
            profile = profiles.get(record.student_id)
            if not profile:
                continue
            ref = StudentRef(name=profile.student.name, roll_number=profile.student.roll_number)
            for meal in Meal:
                if record.has(meal) and profile.is_eligible(meal):
                    grouped[meal].setdefault(record.student_id, ref)

        meals = [
            MealSummary(meal=meal, students=tuple(students.values()))
            for meal, students in grouped.items()
            if students
        ]
        return AttendanceWindow(start=start, end=end, meals=meals)


class DailyStatsCalculator:
    """Today's headline numbers across currently active students.

    A student counts as present when at least one meal their plan includes is
    marked, the same rule the window aggregator uses.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        directory: StudentDirectory,
        *,
        clock: Clock | None = None,
    ):
        self._attendance = attendance
        self._directory = directory
        self._clock = clock or SystemClock()

    async def today_stats(self, on: Optional[date] = None) -> TodayStats:
        on = on or self._clock.now().date()
        active = {p.student_id: p for p in await self._directory.list_active(on)}
        records = await self._attendance.list_for_date(on)

        present = {
            r.student_id
            for r in records
            if r.student_id in active and r.marked_meals & active[r.student_id].eligible_meals
        }
        total = len(active)
        return TodayStats(total=total, present=len(present), percentage=percentage_of(len(present), total))

    async def meal_stats(self, on: Optional[date] = None) -> dict[Meal, MealStat]:
        on = on or self._clock.now().date()
        active = {p.student_id: p for p in await self._directory.list_active(on)}
        records = await self._attendance.list_for_date(on)

        stats: dict[Meal, MealStat] = {}
        for meal in Meal:
            eligible = {sid for sid, p in active.items() if p.is_eligible(meal)}
            present = sum(1 for r in records if r.student_id in eligible and r.has(meal))
            stats[meal] = MealStat(present=present, eligible=len(eligible))
        return stats
