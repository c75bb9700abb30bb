from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping, Optional, Protocol

logger = logging.getLogger(__name__)


class NotificationTransport(Protocol):
    """Boundary to the device/OS notification service."""

    async def request_permission(self) -> bool:
        raise NotImplementedError

    async def dispatch(self, title: str, body: str, metadata: Optional[Mapping[str, Any]] = None) -> str:
        """Show a notification immediately and return its identifier."""

        raise NotImplementedError

    async def cancel_all(self) -> None:
        raise NotImplementedError


class LoggingNotificationTransport(NotificationTransport):
    """Transport for servers without a notification service: digests go to the log."""

    def __init__(self, *, permission_granted: bool = True):
        self._permission_granted = permission_granted
        self._pending: dict[str, dict[str, Any]] = {}

    async def request_permission(self) -> bool:
        return self._permission_granted

    async def dispatch(self, title: str, body: str, metadata: Optional[Mapping[str, Any]] = None) -> str:
        notification_id = f"notification_{uuid.uuid4().hex}"
        self._pending[notification_id] = {"title": title, "body": body, "metadata": dict(metadata or {})}
        logger.info("%s\n%s", title, body)
        return notification_id

    async def cancel_all(self) -> None:
        self._pending.clear()
