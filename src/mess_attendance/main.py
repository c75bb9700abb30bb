from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .config import get_settings_module
from .container import Container, build_container
from .core.exceptions import DomainError
from .database.bootstrap import apply_schema, list_tables
from .notifications.controller import register as register_notifications

logger = logging.getLogger("mess_attendance")


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger("mess_attendance")
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        root.addHandler(handler)
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))


def load_settings():
    load_dotenv(override=False)
    return importlib.import_module(get_settings_module())


def create_app(container: Optional[Container] = None) -> Flask:
    settings = load_settings()
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.debug(
            "settings=%s db=%s@%s:%s/%s",
            settings.__name__,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        container = build_container(
            db_config=db_config,
            notification_defaults=getattr(settings, "NOTIFICATION_DEFAULTS", None),
        )

    register_attendance(app, container)
    register_notifications(app, container)
    app.extensions["mess_attendance"] = container

    if bool(getattr(settings, "START_SCHEDULER", False)):
        start_scheduler(container)

    return app


def start_scheduler(container: Container) -> bool:
    try:
        started = container.runner.run(container.scheduler.start())
    except DomainError as e:
        # Permission denied or store down at boot; the web app still serves requests.
        logger.warning("Attendance notifications not started: %s", e)
        return False
    if not started:
        logger.info("Attendance notifications are disabled in settings")
    return started
