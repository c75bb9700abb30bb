from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import Clock, SystemClock
from ..core.enums import SchedulerState
from ..core.exceptions import PermissionDeniedError
from ..tracking.service import DailyStatsCalculator, WindowAggregator
from .formatter import TimeWindowLabel, format_notification
from .history import NotificationHistory
from .model import NotificationConfig, NotificationHistoryItem, NotificationMessage
from .settings_repository import SettingsRepository
from .transport import NotificationTransport

logger = logging.getLogger(__name__)


def should_send(hour: int, config: NotificationConfig) -> bool:
    """True when ``hour`` falls inside exactly one meal's active hours."""
    return sum(1 for hours in config.active_hours.values() if hours.contains(hour)) == 1


class NotificationScheduler:
    """Recurring attendance digest.

    Every tick re-reads the settings, checks the active-hours gate, aggregates
    the attendance updated since the previous window and dispatches a digest.
    Failures inside a tick are logged and the next tick runs as usual.

    The tick cadence is ``frequency_minutes``. The look-back window starts
    where the previous aggregated window ended, so a late tick (host
    suspended, slow store) still covers the gap, capped at
    ``max_lookback_minutes``. Closed active hours reset the window.
    """

    def __init__(
        self,
        *,
        settings: SettingsRepository,
        aggregator: WindowAggregator,
        stats: DailyStatsCalculator,
        transport: NotificationTransport,
        clock: Clock | None = None,
        history: NotificationHistory | None = None,
    ):
        self._settings = settings
        self._aggregator = aggregator
        self._stats = stats
        self._transport = transport
        self._clock = clock or SystemClock()
        self._history = history or NotificationHistory()

        self._state = SchedulerState.STOPPED
        self._config: Optional[NotificationConfig] = None
        self._task: Optional[asyncio.Task] = None
        self._tick_lock: Optional[asyncio.Lock] = None
        self._last_window_end: Optional[datetime] = None
        self.last_notification_time: Optional[datetime] = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def history(self) -> NotificationHistory:
        return self._history

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> bool:
        """Begin ticking if notifications are enabled.

        Returns False when the stored settings are disabled. Raises
        PermissionDeniedError when the transport refuses permission.
        """

        if self.is_running:
            return True

        config = await self._settings.load_notification_config()
        self._config = config
        if not config.enabled:
            self._state = SchedulerState.DISABLED
            return False

        await self._require_permission()
        self._launch()
        return True

    async def run(self) -> None:
        """Start and keep ticking until disabled or stopped."""
        if await self.start() and self._task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def enable(self) -> None:
        await self._require_permission()

        config = await self._settings.load_notification_config()
        self._config = config.with_changes(enabled=True)
        await self._settings.save_notification_config(self._config)

        await self._cancel_task()
        self._launch()
        logger.info("Attendance notifications enabled (every %s min)", self._config.frequency_minutes)

    async def disable(self) -> None:
        config = await self._settings.load_notification_config()
        self._config = config.with_changes(enabled=False)
        await self._settings.save_notification_config(self._config)

        await self._cancel_task()
        await self._enter_disabled()
        logger.info("Attendance notifications disabled")

    async def stop(self) -> None:
        """Stop ticking without touching the stored settings."""
        await self._cancel_task()
        self._state = SchedulerState.STOPPED

    async def tick(self) -> Optional[NotificationMessage]:
        """Run one gate-check/aggregate/format/dispatch cycle.

        Returns the dispatched message, or None when nothing was sent.
        """

        if self._tick_lock is None:
            self._tick_lock = asyncio.Lock()

        async with self._tick_lock:
            if self._state == SchedulerState.DISABLED:
                return None
            self._state = SchedulerState.RUNNING
            try:
                return await self._tick()
            except Exception:
                logger.exception("Attendance notification tick failed")
                return None
            finally:
                if self._state == SchedulerState.RUNNING:
                    self._state = SchedulerState.IDLE

    async def _tick(self) -> Optional[NotificationMessage]:
        config = await self._settings.load_notification_config()
        self._config = config
        if not config.enabled:
            await self._enter_disabled()
            return None

        now = self._clock.now()
        if not should_send(now.hour, config):
            self._last_window_end = None
            return None

        start = self._window_start(now, config)
        # The previous window already reported rows stamped at its end.
        continued = self._last_window_end is not None and start == self._last_window_end
        window = await self._aggregator.aggregate(start, now, exclusive_start=continued)
        stats = await self._stats.today_stats(now.date())
        message = format_notification(window, window.meals, stats, config)

        if message.is_empty:
            self._last_window_end = now
            return None

        label = TimeWindowLabel.of(window)
        notification_id = await self._transport.dispatch(
            message.title,
            message.body,
            {
                "type": "attendance_update",
                "date": now.date().isoformat(),
                "time_window": {"start": label.start, "end": label.end},
            },
        )
        self._last_window_end = now
        self.last_notification_time = now
        self._history.add(
            NotificationHistoryItem(
                notification_id=notification_id,
                title=message.title,
                body=message.body,
                timestamp=now,
                window_start=label.start,
                window_end=label.end,
            ),
            now=now,
        )
        logger.info("Notification sent: %s", message.title)
        return message

    def _window_start(self, now: datetime, config: NotificationConfig) -> datetime:
        if self._last_window_end is None:
            return now - timedelta(minutes=config.frequency_minutes)
        earliest = now - timedelta(minutes=config.max_lookback_minutes)
        return max(min(self._last_window_end, now), earliest)

    async def _loop(self) -> None:
        while True:
            await self.tick()
            if self._state == SchedulerState.DISABLED:
                return
            config = self._config or NotificationConfig()
            await self._clock.sleep(config.frequency_minutes * 60)

    def _launch(self) -> None:
        self._last_window_end = None
        self._state = SchedulerState.IDLE
        self._task = asyncio.create_task(self._loop())

    async def _require_permission(self) -> None:
        if not await self._transport.request_permission():
            self._state = SchedulerState.DISABLED
            logger.warning("Notification permission not granted")
            raise PermissionDeniedError("Notification permission was denied")

    async def _enter_disabled(self) -> None:
        self._state = SchedulerState.DISABLED
        self._last_window_end = None
        await self._transport.cancel_all()

    async def _cancel_task(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
