from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import Meal
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, run_blocking
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, student_id, attendance_date, breakfast, lunch, dinner, updated_at, scanned_at"


def _to_record(r: Mapping[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        attendance_date=r["attendance_date"],
        breakfast=bool(r["breakfast"]),
        lunch=bool(r["lunch"]),
        dinner=bool(r["dinner"]),
        updated_at=r["updated_at"],
        scanned_at=r.get("scanned_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    async def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        return await run_blocking(self._get_one, "attendance_id=%s", (int(record_id),))

    async def get_for_student_and_date(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        return await run_blocking(
            self._get_one,
            "student_id=%s AND attendance_date=%s",
            (int(student_id), attendance_date),
        )

    async def list_for_date(
        self,
        attendance_date: date,
        *,
        updated_from: Optional[datetime] = None,
        updated_to: Optional[datetime] = None,
    ) -> Sequence[AttendanceRecord]:
        return await run_blocking(self._list_for_date, attendance_date, updated_from, updated_to)

    async def upsert(
        self,
        *,
        student_id: int,
        attendance_date: date,
        meals: Mapping[Meal, bool],
        now: datetime,
        scanned_at: Optional[datetime] = None,
    ) -> AttendanceRecord:
        return await run_blocking(self._upsert, int(student_id), attendance_date, dict(meals), now, scanned_at)

    async def delete(self, record_id: int) -> bool:
        return await run_blocking(self._delete, int(record_id))

    def _get_one(self, where: str, params: tuple) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE {where}", params)
            r = fetchone(cur)
            return _to_record(r) if r else None

    def _list_for_date(
        self,
        attendance_date: date,
        updated_from: Optional[datetime],
        updated_to: Optional[datetime],
    ) -> list[AttendanceRecord]:
        clauses = ["attendance_date=%s"]
        params: list[object] = [attendance_date]

        if updated_from is not None:
            clauses.append("updated_at>=%s")
            params.append(updated_from)
        if updated_to is not None:
            clauses.append("updated_at<=%s")
            params.append(updated_to)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE {where} ORDER BY updated_at ASC",
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def _upsert(
        self,
        student_id: int,
        attendance_date: date,
        meals: dict[Meal, bool],
        now: datetime,
        scanned_at: Optional[datetime],
    ) -> AttendanceRecord:
        # The UNIQUE(student_id, attendance_date) key makes this a single atomic statement.
        updates = [f"{m.value}=VALUES({m.value})" for m in Meal if m in meals]
        updates.append("updated_at=VALUES(updated_at)")
        updates.append("scanned_at=COALESCE(scanned_at, VALUES(scanned_at))")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO attendance(student_id, attendance_date, breakfast, lunch, dinner, updated_at, scanned_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE {", ".join(updates)}
                """,
                (
                    student_id,
                    attendance_date,
                    bool(meals.get(Meal.BREAKFAST, False)),
                    bool(meals.get(Meal.LUNCH, False)),
                    bool(meals.get(Meal.DINNER, False)),
                    now,
                    scanned_at,
                ),
            )
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE student_id=%s AND attendance_date=%s",
                (student_id, attendance_date),
            )
            return _to_record(fetchone(cur))

    def _delete(self, record_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance WHERE attendance_id=%s", (record_id,))
            return cur.rowcount > 0
