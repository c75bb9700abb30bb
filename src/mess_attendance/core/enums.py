from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "admin"
    STUDENT = "student"


class Meal(str, Enum):
    """A meal of the day. Declaration order is the display order."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class MutationSource(str, Enum):
    """Entry point that requested an attendance change (for logs only)."""

    QR_SCAN = "qr_scan"
    MANUAL_TOGGLE = "manual_toggle"
    BULK_MARK = "bulk_mark"
    EDIT_MODAL = "edit_modal"


class SchedulerState(str, Enum):
    STOPPED = "stopped"
    IDLE = "idle"
    RUNNING = "running"
    DISABLED = "disabled"
