from __future__ import annotations

import json
from typing import Any, Mapping, Optional, Protocol

from ..core.constants import NOTIFICATION_SETTINGS_KEY
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, run_blocking
from .model import NotificationConfig


class SettingsRepository(Protocol):
    async def load_notification_config(self) -> NotificationConfig:
        raise NotImplementedError

    async def save_notification_config(self, config: NotificationConfig) -> None:
        raise NotImplementedError


class MySQLSettingsRepository(SettingsRepository):
    """Key/value settings table holding JSON documents.

    ``defaults`` (from the settings module) sit between the built-in defaults
    and whatever an admin has stored.
    """

    def __init__(self, conn_factory: DatabaseConnection, *, defaults: Optional[Mapping[str, Any]] = None):
        self._conn_factory = conn_factory
        self._defaults = dict(defaults or {})

    async def load_notification_config(self) -> NotificationConfig:
        raw = await run_blocking(self._get, NOTIFICATION_SETTINGS_KEY)
        stored = json.loads(raw) if raw else {}
        return NotificationConfig.from_dict({**self._defaults, **stored})

    async def save_notification_config(self, config: NotificationConfig) -> None:
        await run_blocking(self._put, NOTIFICATION_SETTINGS_KEY, json.dumps(config.to_dict()))

    def _get(self, key: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT setting_value FROM app_settings WHERE setting_key=%s", (key,))
            r = fetchone(cur)
            return r["setting_value"] if r else None

    def _put(self, key: str, value: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO app_settings(setting_key, setting_value)
                VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE setting_value=VALUES(setting_value)
                """,
                (key, value),
            )
