from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime
from typing import Iterable, Mapping, Optional

from ..common.datetime_utils import Clock, SystemClock
from ..core.enums import Meal, MutationSource
from ..core.exceptions import DomainError, NotFoundError, TransientError, ValidationError
from ..students.model import StudentProfile
from ..students.repository import StudentDirectory
from .meal_time import current_meal
from .model import AttendanceRecord, BulkMarkFailure, BulkMarkResult, QRMarkResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Single rule set for every attendance mutation.

    QR scans, per-meal toggles, bulk marking and the edit-all modal all end up
    in ``_apply`` so the eligibility gate and upsert semantics cannot drift.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        directory: StudentDirectory,
        *,
        clock: Clock | None = None,
    ):
        self._attendance = attendance
        self._directory = directory
        self._clock = clock or SystemClock()

    async def mark(
        self,
        student_id: int,
        attendance_date: date,
        meals: Mapping[Meal, bool],
        *,
        source: MutationSource = MutationSource.MANUAL_TOGGLE,
    ) -> AttendanceRecord:
        profile = await self._get_profile(student_id)
        return await self._apply(profile, attendance_date, meals, source=source)

    async def toggle_meal(self, student_id: int, attendance_date: date, meal: Meal, present: bool) -> AttendanceRecord:
        return await self.mark(student_id, attendance_date, {meal: present}, source=MutationSource.MANUAL_TOGGLE)

    async def edit_meals(self, student_id: int, attendance_date: date, meals: Mapping[Meal, bool]) -> AttendanceRecord:
        """Edit-all modal: the row may not exist yet, so this is an upsert too."""
        return await self.mark(student_id, attendance_date, meals, source=MutationSource.EDIT_MODAL)

    async def update_record(self, record_id: Optional[int], meals: Mapping[Meal, bool]) -> AttendanceRecord:
        if record_id is None:
            raise NotFoundError("Attendance record not found")

        record = await self._attendance.get_by_id(record_id)
        if not record:
            raise NotFoundError("Attendance record not found")

        profile = await self._get_profile(record.student_id)
        return await self._apply(profile, record.attendance_date, meals, source=MutationSource.EDIT_MODAL)

    async def delete(self, record_id: Optional[int]) -> None:
        if record_id is None:
            raise NotFoundError("Nothing to delete: attendance was never recorded")

        if not await self._attendance.delete(record_id):
            raise NotFoundError("Attendance record not found or already deleted")
        logger.info("Deleted attendance record %s", record_id)

    async def bulk_mark(self, student_ids: Iterable[int], attendance_date: date, meal: Meal) -> BulkMarkResult:
        ids = list(dict.fromkeys(int(i) for i in student_ids))
        if not ids:
            raise ValidationError("Select at least one student")

        async def _one(student_id: int) -> Optional[BulkMarkFailure]:
            try:
                await self.mark(student_id, attendance_date, {meal: True}, source=MutationSource.BULK_MARK)
            except DomainError as e:
                return BulkMarkFailure(student_id=student_id, message=str(e))
            return None

        outcomes = await asyncio.gather(*(_one(i) for i in ids))

        failed = [f for f in outcomes if f is not None]
        failed_ids = {f.student_id for f in failed}
        result = BulkMarkResult(
            total=len(ids),
            succeeded=[i for i in ids if i not in failed_ids],
            failed=failed,
        )
        if failed:
            logger.warning("Bulk %s marking for %s: %s", meal.value, attendance_date, result.summary)
        return result

    async def mark_current_meal(self, user_id: str, *, now: datetime | None = None) -> QRMarkResult:
        """External trigger: the authenticated student scanned the mess QR code."""

        now = now or self._clock.now()
        today = now.date()

        profile = await self._directory.get_profile_by_user_id(user_id)
        if not profile:
            raise NotFoundError("Student profile not found. Please contact administrator.")

        meal = current_meal(now)
        if meal is None:
            raise ValidationError("No active meal time at the moment. Please scan during meal hours.")
        self._require_eligible(profile, {meal: True})

        student = profile.student
        if student.end_date < today:
            raise ValidationError("Your meal plan has expired. Please renew to continue.")
        if student.join_date > today:
            raise ValidationError("Your meal plan has not started yet.")

        existing = await self._attendance.get_for_student_and_date(student.student_id, today)
        if existing and existing.has(meal):
            return QRMarkResult(meal=meal, record=existing, already_marked=True)

        record = await self._apply(
            profile,
            today,
            {meal: True},
            source=MutationSource.QR_SCAN,
            now=now,
            scanned_at=now,
        )
        return QRMarkResult(meal=meal, record=record)

    async def _get_profile(self, student_id: int) -> StudentProfile:
        profile = await self._directory.get_profile(int(student_id))
        if not profile:
            raise NotFoundError(f"Student {student_id} not found")
        return profile

    def _require_eligible(self, profile: StudentProfile, meals: Mapping[Meal, bool]) -> None:
        for meal, value in meals.items():
            if value and not profile.is_eligible(meal):
                raise ValidationError(f"Student plan does not include {meal.label}")

    async def _apply(
        self,
        profile: StudentProfile,
        attendance_date: date,
        meals: Mapping[Meal, bool],
        *,
        source: MutationSource,
        now: datetime | None = None,
        scanned_at: datetime | None = None,
    ) -> AttendanceRecord:
        if not meals:
            raise ValidationError("No meals to update")
        self._require_eligible(profile, meals)

        try:
            record = await self._attendance.upsert(
                student_id=profile.student_id,
                attendance_date=attendance_date,
                meals=dict(meals),
                now=now or self._clock.now(),
                scanned_at=scanned_at,
            )
        except TransientError:
            logger.warning("Marking attendance failed for student %s (%s)", profile.student_id, source.value)
            raise

        logger.info(
            "Attendance %s for student %s on %s via %s",
            {m.value: v for m, v in meals.items()},
            profile.student_id,
            attendance_date,
            source.value,
        )
        return record
