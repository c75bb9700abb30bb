from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from .model import StudentProfile


class StudentDirectory(Protocol):
    async def get_profile(self, student_id: int) -> Optional[StudentProfile]:
        raise NotImplementedError

    async def get_profiles(self, student_ids: Iterable[int]) -> Mapping[int, StudentProfile]:
        """Batch lookup keyed by student_id; unknown ids are left out."""

        raise NotImplementedError

    async def get_profile_by_user_id(self, user_id: str) -> Optional[StudentProfile]:
        raise NotImplementedError

    async def list_active(self, on: date) -> Sequence[StudentProfile]:
        """Students whose active flag is set and whose plan period covers ``on``."""

        raise NotImplementedError
