from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ..core.constants import NOTIFICATION_HISTORY_LIMIT, NOTIFICATION_HISTORY_RETENTION_DAYS
from .model import NotificationHistoryItem


class NotificationHistory:
    """Most recent digests, newest first. Entries older than the retention period are dropped."""

    def __init__(
        self,
        *,
        limit: int = NOTIFICATION_HISTORY_LIMIT,
        retention: timedelta = timedelta(days=NOTIFICATION_HISTORY_RETENTION_DAYS),
    ):
        self._limit = int(limit)
        self._retention = retention
        self._items: list[NotificationHistoryItem] = []

    def add(self, item: NotificationHistoryItem, *, now: datetime) -> None:
        self._items.append(item)
        self._prune(now)

    def items(self, *, now: datetime) -> list[NotificationHistoryItem]:
        self._prune(now)
        return list(self._items)

    def delete(self, notification_id: str) -> bool:
        before = len(self._items)
        self._items = [i for i in self._items if i.notification_id != notification_id]
        return len(self._items) < before

    def clear(self) -> None:
        self._items.clear()

    @property
    def latest(self) -> Optional[NotificationHistoryItem]:
        return self._items[0] if self._items else None

    def _prune(self, now: datetime) -> None:
        cutoff = now - self._retention
        kept = [i for i in self._items if i.timestamp >= cutoff]
        kept.sort(key=lambda i: i.timestamp, reverse=True)
        self._items = kept[: self._limit]
