from __future__ import annotations

from typing import Any, Mapping

from ..common.datetime_utils import Clock, SystemClock
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import NotificationConfig, NotificationHistoryItem
from .scheduler import NotificationScheduler
from .settings_repository import SettingsRepository


class NotificationSettingsService:
    """Use cases behind the admin notification settings screen."""

    def __init__(self, settings: SettingsRepository, scheduler: NotificationScheduler, *, clock: Clock | None = None):
        self._settings = settings
        self._scheduler = scheduler
        self._clock = clock or SystemClock()

    async def get_config(self) -> NotificationConfig:
        return await self._settings.load_notification_config()

    async def update_config(self, *, current_role: Role, changes: Mapping[str, Any]) -> NotificationConfig:
        _require_admin(current_role)
        if not isinstance(changes, Mapping):
            raise ValidationError("Settings must be an object")

        current = await self._settings.load_notification_config()
        merged = current.to_dict()
        for key, value in changes.items():
            if key not in merged:
                raise ValidationError(f"Unknown setting: {key}")
            if key == "active_hours":
                merged[key] = {**merged[key], **_check_active_hours(value)}
            else:
                merged[key] = _check_setting(key, value)

        try:
            updated = NotificationConfig.from_dict(merged).validate()
        except (KeyError, TypeError, ValueError):
            raise ValidationError("Invalid notification settings") from None

        # Switching on or off goes through the scheduler (permission, cancellation).
        await self._settings.save_notification_config(updated.with_changes(enabled=current.enabled))
        if updated.enabled and not current.enabled:
            await self._scheduler.enable()
        elif not updated.enabled and current.enabled:
            await self._scheduler.disable()
        return await self._settings.load_notification_config()

    async def toggle_enabled(self, *, current_role: Role) -> NotificationConfig:
        current = await self._settings.load_notification_config()
        return await self.update_config(current_role=current_role, changes={"enabled": not current.enabled})

    async def set_frequency(self, *, current_role: Role, minutes: int) -> NotificationConfig:
        return await self.update_config(current_role=current_role, changes={"frequency_minutes": minutes})

    async def history(self) -> list[NotificationHistoryItem]:
        return self._scheduler.history.items(now=self._clock.now())

    async def delete_history_item(self, notification_id: str) -> None:
        if not self._scheduler.history.delete(notification_id):
            raise NotFoundError("Notification not found")

    async def clear_history(self) -> None:
        self._scheduler.history.clear()


def _require_admin(role: Role) -> None:
    if role != Role.ADMIN:
        raise AuthorizationError("Only administrators can change notification settings")


_BOOL_SETTINGS = ("enabled", "show_student_names", "show_when_no_activity")
_INT_SETTINGS = ("frequency_minutes", "max_lookback_minutes")


def _check_setting(key: str, value: Any) -> Any:
    if key in _BOOL_SETTINGS and not isinstance(value, bool):
        raise ValidationError(f"{key} must be true or false")
    # bool is an int subclass; reject it for numeric settings.
    if key in _INT_SETTINGS and (isinstance(value, bool) or not isinstance(value, int)):
        raise ValidationError(f"{key} must be a whole number")
    return value


def _check_active_hours(value: Any) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        raise ValidationError("active_hours must be an object")
    for meal, hours in value.items():
        if not isinstance(hours, Mapping) or not all(
            isinstance(hours.get(k), int) and not isinstance(hours.get(k), bool) for k in ("start", "end")
        ):
            raise ValidationError(f"active_hours.{meal} needs whole-number start and end")
    return dict(value)
