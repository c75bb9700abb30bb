from __future__ import annotations

from datetime import date, datetime
from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import Meal
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    async def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    async def get_for_student_and_date(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    async def list_for_date(
        self,
        attendance_date: date,
        *,
        updated_from: Optional[datetime] = None,
        updated_to: Optional[datetime] = None,
    ) -> Sequence[AttendanceRecord]:
        """Rows for one day, optionally limited to an inclusive updated_at range."""

        raise NotImplementedError

    async def upsert(
        self,
        *,
        student_id: int,
        attendance_date: date,
        meals: Mapping[Meal, bool],
        now: datetime,
        scanned_at: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Atomically create or partially update the (student_id, date) row.

        New rows take ``meals`` and default the rest to False; existing rows only
        change the meals given. ``updated_at`` is set to ``now`` either way and
        ``scanned_at`` is only written when the row has none yet.
        """

        raise NotImplementedError

    async def delete(self, record_id: int) -> bool:
        raise NotImplementedError
