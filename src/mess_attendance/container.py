from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.async_runner import BackgroundLoop
from .common.datetime_utils import Clock, SystemClock
from .database.connection import DBConfig, DatabaseConnection
from .notifications.history import NotificationHistory
from .notifications.scheduler import NotificationScheduler
from .notifications.service import NotificationSettingsService
from .notifications.settings_repository import MySQLSettingsRepository, SettingsRepository
from .notifications.transport import LoggingNotificationTransport, NotificationTransport
from .students.mysql_student_directory import MySQLStudentDirectory
from .students.repository import StudentDirectory
from .tracking.service import DailyStatsCalculator, WindowAggregator


@dataclass(frozen=True)
class Container:
    runner: BackgroundLoop
    clock: Clock

    attendance_repo: AttendanceRepository
    student_directory: StudentDirectory
    settings_repo: SettingsRepository
    transport: NotificationTransport

    attendance_service: AttendanceService
    window_aggregator: WindowAggregator
    daily_stats: DailyStatsCalculator
    scheduler: NotificationScheduler
    notification_settings_service: NotificationSettingsService


def assemble(
    *,
    attendance_repo: AttendanceRepository,
    student_directory: StudentDirectory,
    settings_repo: SettingsRepository,
    transport: NotificationTransport,
    clock: Optional[Clock] = None,
    runner: Optional[BackgroundLoop] = None,
) -> Container:
    clock = clock or SystemClock()

    attendance_service = AttendanceService(attendance_repo, student_directory, clock=clock)
    window_aggregator = WindowAggregator(attendance_repo, student_directory)
    daily_stats = DailyStatsCalculator(attendance_repo, student_directory, clock=clock)
    scheduler = NotificationScheduler(
        settings=settings_repo,
        aggregator=window_aggregator,
        stats=daily_stats,
        transport=transport,
        clock=clock,
        history=NotificationHistory(),
    )
    notification_settings_service = NotificationSettingsService(settings_repo, scheduler, clock=clock)

    return Container(
        runner=runner or BackgroundLoop(),
        clock=clock,
        attendance_repo=attendance_repo,
        student_directory=student_directory,
        settings_repo=settings_repo,
        transport=transport,
        attendance_service=attendance_service,
        window_aggregator=window_aggregator,
        daily_stats=daily_stats,
        scheduler=scheduler,
        notification_settings_service=notification_settings_service,
    )


def build_container(
    *,
    db_config: dict,
    transport: Optional[NotificationTransport] = None,
    notification_defaults: Optional[dict] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble(
        attendance_repo=MySQLAttendanceRepository(conn),
        student_directory=MySQLStudentDirectory(conn),
        settings_repo=MySQLSettingsRepository(conn, defaults=notification_defaults),
        transport=transport or LoggingNotificationTransport(),
    )
