from datetime import datetime

from mess_attendance.core.enums import Meal
from mess_attendance.notifications.formatter import format_notification
from mess_attendance.notifications.model import NotificationConfig
from mess_attendance.tracking.model import AttendanceWindow, MealSummary, StudentRef, TodayStats

STATS = TodayStats(total=40, present=12, percentage=30)


def _window(*meals):
    return AttendanceWindow(start=datetime(2026, 3, 2, 7, 55), end=datetime(2026, 3, 2, 8, 5), meals=list(meals))


def _summary(meal, *names):
    return MealSummary(meal=meal, students=tuple(StudentRef(name=n) for n in names))


def test_nothing_to_report_yields_empty_message():
    window = _window()
    message = format_notification(window, window.meals, STATS, NotificationConfig())
    assert message.is_empty


def test_no_activity_digest_when_enabled():
    window = _window()
    config = NotificationConfig(show_when_no_activity=True)

    message = format_notification(window, window.meals, STATS, config)

    assert message.title == "📊 Attendance Update"
    assert message.body == "No new attendance in the last 10 minutes.\n\n📈 Today: 12/40 (30%)"


def test_digest_lists_meals_with_names():
    window = _window(_summary(Meal.BREAKFAST, "Asha", "Ravi"))

    message = format_notification(window, window.meals, STATS, NotificationConfig())

    assert message.title == "📊 Attendance Update (7:55 AM - 8:05 AM)"
    assert message.body == "🌅 Breakfast: 2 students marked\n   Asha, Ravi\n\n📈 Today: 12/40 (30%)"


def test_names_are_truncated_after_five():
    names = [f"S{i}" for i in range(1, 8)]
    window = _window(_summary(Meal.LUNCH, *names))

    message = format_notification(window, window.meals, STATS, NotificationConfig())

    assert "   S1, S2, S3, S4, S5 +2 more" in message.body
    assert "S6" not in message.body


def test_names_hidden_and_meals_in_service_order():
    window = _window(_summary(Meal.DINNER, "Asha"), _summary(Meal.BREAKFAST, "Ravi", "Meera"))
    config = NotificationConfig(show_student_names=False)

    message = format_notification(window, window.meals, STATS, config)

    assert message.body == (
        "🌅 Breakfast: 2 students marked\n\n"
        "🌙 Dinner: 1 student marked\n\n"
        "📈 Today: 12/40 (30%)"
    )


def test_zero_count_meals_are_skipped():
    window = _window(_summary(Meal.LUNCH))
    assert format_notification(window, window.meals, STATS, NotificationConfig()).is_empty
