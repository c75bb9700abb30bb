"""Run the attendance digest scheduler without the web app."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from mess_attendance.container import build_container
from mess_attendance.core.exceptions import DomainError
from mess_attendance.main import configure_logging, load_settings

logger = logging.getLogger("mess_attendance.scripts.run_scheduler")


async def _run(db_config: dict, notification_defaults: Optional[dict]) -> None:
    container = build_container(db_config=db_config, notification_defaults=notification_defaults)
    try:
        await container.scheduler.run()
    except DomainError as e:
        logger.error("Scheduler not started: %s", e)


def main() -> None:
    settings = load_settings()
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    asyncio.run(_run(dict(settings.DB_CONFIG), getattr(settings, "NOTIFICATION_DEFAULTS", None)))


if __name__ == "__main__":
    main()
