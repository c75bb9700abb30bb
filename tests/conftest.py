from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Iterable, Mapping, Optional

import pytest

from mess_attendance.attendance.model import AttendanceRecord
from mess_attendance.core.enums import Meal
from mess_attendance.core.exceptions import TransientError
from mess_attendance.notifications.model import NotificationConfig
from mess_attendance.plans.model import Plan
from mess_attendance.students.model import Student, StudentProfile


class FakeClock:
    def __init__(self, now: datetime):
        self.current = now
        self.sleeps: list[float] = []

    def now(self) -> datetime:
        return self.current

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += timedelta(seconds=seconds)
        await asyncio.sleep(0)


class InMemoryAttendance:
    def __init__(self):
        self._by_student_date: dict[tuple[int, date], AttendanceRecord] = {}
        self._id = 0
        self.writes: list[tuple[int, date, dict]] = []
        self.deletes: list[int] = []
        self.fail_for: set[int] = set()
        self.fail_reads = False

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        if record.record_id is None:
            self._id += 1
            record = replace(record, record_id=self._id)
        self._by_student_date[(record.student_id, record.attendance_date)] = record
        return record

    async def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        return next((r for r in self._by_student_date.values() if r.record_id == record_id), None)

    async def get_for_student_and_date(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        return self._by_student_date.get((student_id, attendance_date))

    async def list_for_date(self, attendance_date: date, *, updated_from=None, updated_to=None):
        if self.fail_reads:
            raise TransientError("store offline")
        rows = [r for r in self._by_student_date.values() if r.attendance_date == attendance_date]
        if updated_from is not None:
            rows = [r for r in rows if r.updated_at >= updated_from]
        if updated_to is not None:
            rows = [r for r in rows if r.updated_at <= updated_to]
        return rows

    async def upsert(
        self,
        *,
        student_id: int,
        attendance_date: date,
        meals: Mapping[Meal, bool],
        now: datetime,
        scanned_at: Optional[datetime] = None,
    ) -> AttendanceRecord:
        await asyncio.sleep(0)
        if student_id in self.fail_for:
            raise TransientError("Database is unavailable, please try again")

        self.writes.append((student_id, attendance_date, dict(meals)))
        existing = self._by_student_date.get((student_id, attendance_date))
        flags = {m: (existing.has(m) if existing else False) for m in Meal}
        flags.update(meals)
        if existing:
            record_id = existing.record_id
            scanned_at = existing.scanned_at or scanned_at
        else:
            self._id += 1
            record_id = self._id
        record = AttendanceRecord(
            record_id=record_id,
            student_id=student_id,
            attendance_date=attendance_date,
            breakfast=flags[Meal.BREAKFAST],
            lunch=flags[Meal.LUNCH],
            dinner=flags[Meal.DINNER],
            updated_at=now,
            scanned_at=scanned_at,
        )
        self._by_student_date[(student_id, attendance_date)] = record
        return record

    async def delete(self, record_id: int) -> bool:
        self.deletes.append(record_id)
        for key, r in list(self._by_student_date.items()):
            if r.record_id == record_id:
                del self._by_student_date[key]
                return True
        return False

    def rows(self) -> list[AttendanceRecord]:
        return list(self._by_student_date.values())


class InMemoryDirectory:
    def __init__(self, profiles: Iterable[StudentProfile] = ()):
        self.profiles: dict[int, StudentProfile] = {p.student_id: p for p in profiles}

    def add(self, profile: StudentProfile) -> StudentProfile:
        self.profiles[profile.student_id] = profile
        return profile

    async def get_profile(self, student_id: int) -> Optional[StudentProfile]:
        return self.profiles.get(student_id)

    async def get_profiles(self, student_ids):
        return {i: self.profiles[i] for i in student_ids if i in self.profiles}

    async def get_profile_by_user_id(self, user_id: str) -> Optional[StudentProfile]:
        return next((p for p in self.profiles.values() if p.student.user_id == user_id), None)

    async def list_active(self, on: date):
        return [p for p in self.profiles.values() if p.student.is_current(on)]


class InMemorySettings:
    def __init__(self, config: Optional[NotificationConfig] = None):
        self.config = config or NotificationConfig()
        self.saves = 0

    async def load_notification_config(self) -> NotificationConfig:
        return self.config

    async def save_notification_config(self, config: NotificationConfig) -> None:
        self.saves += 1
        self.config = config


class FakeTransport:
    def __init__(self, *, granted: bool = True):
        self.granted = granted
        self.permission_requests = 0
        self.dispatched: list[dict] = []
        self.cancel_calls = 0

    async def request_permission(self) -> bool:
        self.permission_requests += 1
        return self.granted

    async def dispatch(self, title: str, body: str, metadata=None) -> str:
        self.dispatched.append({"title": title, "body": body, "metadata": dict(metadata or {})})
        return f"notification_{len(self.dispatched)}"

    async def cancel_all(self) -> None:
        self.cancel_calls += 1


def make_profile(
    student_id: int,
    name: str,
    meals_text: str = "Breakfast, Lunch, Dinner",
    *,
    user_id: Optional[str] = None,
    roll_number: Optional[str] = None,
    is_active: bool = True,
    join_date: date = date(2026, 1, 1),
    end_date: date = date(2026, 12, 31),
) -> StudentProfile:
    plan = Plan.from_text(plan_id=student_id * 10, name=f"{meals_text} plan", meals_text=meals_text)
    student = Student(
        student_id=student_id,
        user_id=user_id,
        name=name,
        roll_number=roll_number,
        plan_id=plan.plan_id,
        is_active=is_active,
        join_date=join_date,
        end_date=end_date,
    )
    return StudentProfile(student=student, plan=plan)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 8, 5, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def directory() -> InMemoryDirectory:
    return InMemoryDirectory()


@pytest.fixture
def settings_repo() -> InMemorySettings:
    return InMemorySettings()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture(name="make_profile")
def make_profile_fixture():
    return make_profile


@pytest.fixture
def container(attendance_repo, directory, settings_repo, transport, clock):
    from mess_attendance.container import assemble

    c = assemble(
        attendance_repo=attendance_repo,
        student_directory=directory,
        settings_repo=settings_repo,
        transport=transport,
        clock=clock,
    )
    yield c
    c.runner.stop()


@pytest.fixture
def client(monkeypatch, container):
    from mess_attendance.main import create_app

    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    return app.test_client()


@pytest.fixture
def sign_in(client):
    def _sign_in(*, user_id: str = "admin-1", role: str = "admin") -> None:
        with client.session_transaction() as sess:
            sess["user_id"] = user_id
            sess["role"] = role

    return _sign_in
