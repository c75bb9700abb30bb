from __future__ import annotations

import asyncio
from datetime import date, datetime
from typing import Protocol


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def format_clock_time(value: datetime) -> str:
    """12-hour clock label, e.g. ``8:05 AM``."""
    hour = value.hour % 12 or 12
    return f"{hour}:{value.minute:02d} {'AM' if value.hour < 12 else 'PM'}"


class Clock(Protocol):
    def now(self) -> datetime:
        raise NotImplementedError

    async def sleep(self, seconds: float) -> None:
        raise NotImplementedError


class SystemClock:
    """Wall clock backed by asyncio timers."""

    def now(self) -> datetime:
        return now_local()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
