from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, run_blocking
from ..plans.model import Plan
from .model import Student, StudentProfile
from .repository import StudentDirectory

_PROFILE_SELECT = """
    SELECT
        s.student_id, s.user_id, s.full_name, s.roll_number, s.plan_id,
        s.is_active, s.join_date, s.end_date,
        p.plan_name, p.meals
    FROM students s
    LEFT JOIN plans p ON p.plan_id = s.plan_id
"""


def _to_profile(r: Mapping[str, Any]) -> StudentProfile:
    student = Student(
        student_id=int(r["student_id"]),
        user_id=r.get("user_id"),
        name=r["full_name"],
        roll_number=r.get("roll_number"),
        plan_id=int(r["plan_id"]) if r.get("plan_id") is not None else None,
        is_active=bool(r["is_active"]),
        join_date=r["join_date"],
        end_date=r["end_date"],
    )
    plan = Plan.from_row(r) if r.get("plan_id") is not None else None
    return StudentProfile(student=student, plan=plan)


class MySQLStudentDirectory(StudentDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    async def get_profile(self, student_id: int) -> Optional[StudentProfile]:
        return await run_blocking(self._get_one, "s.student_id=%s", (int(student_id),))

    async def get_profile_by_user_id(self, user_id: str) -> Optional[StudentProfile]:
        return await run_blocking(self._get_one, "s.user_id=%s", (str(user_id),))

    async def get_profiles(self, student_ids: Iterable[int]) -> Mapping[int, StudentProfile]:
        ids = sorted({int(i) for i in student_ids})
        if not ids:
            return {}
        placeholders = ",".join(["%s"] * len(ids))
        rows = await run_blocking(self._get_many, f"s.student_id IN ({placeholders})", tuple(ids))
        return {p.student_id: p for p in rows}

    async def list_active(self, on: date) -> Sequence[StudentProfile]:
        return await run_blocking(
            self._get_many,
            "s.is_active=1 AND s.join_date<=%s AND s.end_date>=%s",
            (on, on),
        )

    def _get_one(self, where: str, params: tuple) -> Optional[StudentProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_PROFILE_SELECT} WHERE {where}", params)
            r = fetchone(cur)
            return _to_profile(r) if r else None

    def _get_many(self, where: str, params: tuple) -> list[StudentProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_PROFILE_SELECT} WHERE {where} ORDER BY s.full_name ASC", params)
            return [_to_profile(r) for r in fetchall(cur)]
