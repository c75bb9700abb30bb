import asyncio
from datetime import date, datetime

import pytest

from mess_attendance.attendance.model import AttendanceRecord
from mess_attendance.core.enums import Meal
from mess_attendance.tracking.service import DailyStatsCalculator, percentage_of

DAY = date(2026, 3, 2)


def _mark(repo, student_id, **meals):
    repo.add(
        AttendanceRecord(
            record_id=None,
            student_id=student_id,
            attendance_date=DAY,
            breakfast=meals.get("breakfast", False),
            lunch=meals.get("lunch", False),
            dinner=meals.get("dinner", False),
            updated_at=datetime(2026, 3, 2, 8, 0),
        )
    )


@pytest.fixture
def calculator(attendance_repo, directory, clock):
    return DailyStatsCalculator(attendance_repo, directory, clock=clock)


@pytest.mark.parametrize(
    "part, whole, expected",
    [(0, 0, 0), (5, 0, 0), (1, 3, 33), (2, 3, 67), (1, 8, 13), (3, 3, 100)],
)
def test_percentage_rounds_half_up(part, whole, expected):
    assert percentage_of(part, whole) == expected


def test_no_active_students_gives_zero_percent(calculator):
    stats = asyncio.run(calculator.today_stats(DAY))
    assert (stats.total, stats.present, stats.percentage) == (0, 0, 0)


def test_present_counts_active_students_with_an_eligible_meal(calculator, attendance_repo, directory, make_profile):
    directory.add(make_profile(1, "Asha"))
    directory.add(make_profile(2, "Ravi", "Lunch only"))
    directory.add(make_profile(3, "Meera"))
    directory.add(make_profile(4, "Gone", is_active=False))
    _mark(attendance_repo, 1, breakfast=True)
    _mark(attendance_repo, 2, breakfast=True)
    _mark(attendance_repo, 4, lunch=True)

    stats = asyncio.run(calculator.today_stats())

    assert (stats.total, stats.present, stats.percentage) == (3, 1, 33)


def test_meal_stats_use_eligible_students_as_denominator(calculator, attendance_repo, directory, make_profile):
    directory.add(make_profile(1, "Asha"))
    directory.add(make_profile(2, "Ravi", "Lunch only"))
    _mark(attendance_repo, 1, lunch=True, dinner=True)
    _mark(attendance_repo, 2, lunch=True)

    stats = asyncio.run(calculator.meal_stats(DAY))

    assert (stats[Meal.BREAKFAST].present, stats[Meal.BREAKFAST].eligible) == (0, 1)
    assert (stats[Meal.LUNCH].present, stats[Meal.LUNCH].eligible) == (2, 2)
    assert (stats[Meal.DINNER].present, stats[Meal.DINNER].eligible) == (1, 1)
