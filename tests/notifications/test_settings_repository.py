import asyncio
import json

import mysql.connector
import pytest

from mess_attendance.core.exceptions import TransientError
from mess_attendance.notifications.settings_repository import MySQLSettingsRepository


class FakeCursor:
    def __init__(self, db):
        self._db = db
        self._row = None

    def execute(self, sql, params):
        if self._db.error:
            raise self._db.error
        if sql.strip().startswith("SELECT"):
            value = self._db.values.get(params[0])
            self._row = {"setting_value": value} if value is not None else None
        else:
            self._db.values[params[0]] = params[1]

    def fetchone(self):
        return self._row

    def close(self):
        pass


class FakeConnectionFactory:
    def __init__(self):
        self.values = {}
        self.error = None
        self.commits = 0

    def connect(self):
        return self

    def cursor(self, dictionary=True):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        pass

    def close(self):
        pass


def test_env_defaults_apply_until_settings_are_saved():
    db = FakeConnectionFactory()
    repo = MySQLSettingsRepository(db, defaults={"frequency_minutes": 30})

    assert asyncio.run(repo.load_notification_config()).frequency_minutes == 30

    config = asyncio.run(repo.load_notification_config()).with_changes(frequency_minutes=5, show_student_names=False)
    asyncio.run(repo.save_notification_config(config))

    stored = json.loads(db.values["notification_config"])
    assert stored["frequency_minutes"] == 5
    assert asyncio.run(repo.load_notification_config()) == config


def test_driver_errors_become_transient():
    db = FakeConnectionFactory()
    db.error = mysql.connector.errors.OperationalError("server has gone away")

    with pytest.raises(TransientError):
        asyncio.run(MySQLSettingsRepository(db).load_notification_config())
