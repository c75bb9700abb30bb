from datetime import datetime

import pytest

from mess_attendance.attendance.meal_time import current_meal
from mess_attendance.attendance.qr import validate_qr_code
from mess_attendance.core.enums import Meal


@pytest.mark.parametrize(
    "hour, minute, expected",
    [
        (6, 59, None),
        (7, 0, Meal.BREAKFAST),
        (11, 0, Meal.BREAKFAST),
        (11, 1, None),
        (12, 0, Meal.LUNCH),
        (16, 0, Meal.LUNCH),
        (18, 30, None),
        (19, 0, Meal.DINNER),
        (23, 0, Meal.DINNER),
        (23, 30, None),
    ],
)
def test_current_meal_includes_grace_period(hour, minute, expected):
    assert current_meal(datetime(2026, 3, 2, hour, minute)) == expected


def test_qr_code_formats():
    assert validate_qr_code("mess-management://attendance")
    assert validate_qr_code("  mess://attendance ")
    assert validate_qr_code("https://mess.example.com/attendance/mobile?x=1")
    assert not validate_qr_code("https://example.com/other")
    assert not validate_qr_code("")
    assert not validate_qr_code(None)
