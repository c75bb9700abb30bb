from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..common.datetime_utils import format_clock_time
from ..core.constants import MAX_NAMES_IN_DIGEST
from ..core.enums import Meal
from ..tracking.model import AttendanceWindow, MealSummary, TodayStats
from .model import EMPTY_MESSAGE, NotificationConfig, NotificationMessage

MEAL_EMOJIS = {
    Meal.BREAKFAST: "🌅",
    Meal.LUNCH: "🍽️",
    Meal.DINNER: "🌙",
}

TITLE = "📊 Attendance Update"


@dataclass(frozen=True)
class TimeWindowLabel:
    start: str
    end: str

    @classmethod
    def of(cls, window: AttendanceWindow) -> "TimeWindowLabel":
        return cls(start=format_clock_time(window.start), end=format_clock_time(window.end))


def _footer(stats: TodayStats) -> str:
    return f"📈 Today: {stats.present}/{stats.total} ({stats.percentage}%)"


def _meal_block(summary: MealSummary, show_names: bool) -> str:
    plural = "" if summary.count == 1 else "s"
    line = f"{MEAL_EMOJIS[summary.meal]} {summary.meal.label}: {summary.count} student{plural} marked"
    if not show_names or not summary.students:
        return line

    names = ", ".join(s.name for s in summary.students[:MAX_NAMES_IN_DIGEST])
    extra = summary.count - MAX_NAMES_IN_DIGEST
    if extra > 0:
        names += f" +{extra} more"
    return f"{line}\n   {names}"


def format_notification(
    window: AttendanceWindow,
    meals: Sequence[MealSummary],
    stats: TodayStats,
    config: NotificationConfig,
) -> NotificationMessage:
    order = {meal: i for i, meal in enumerate(Meal)}
    active = sorted((m for m in meals if m.count > 0), key=lambda m: order[m.meal])

    if not active:
        if not config.show_when_no_activity:
            return EMPTY_MESSAGE
        return NotificationMessage(
            title=TITLE,
            body=f"No new attendance in the last {window.minutes} minutes.\n\n{_footer(stats)}",
        )

    body = "\n\n".join(_meal_block(m, config.show_student_names) for m in active)
    label = TimeWindowLabel.of(window)
    return NotificationMessage(
        title=f"{TITLE} ({label.start} - {label.end})",
        body=f"{body}\n\n{_footer(stats)}",
    )
