import os


def get_settings_module() -> str:
    # Environment is taken from APP_ENV, defaulting to development.
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "mess_attendance.config.production"

    if env in {"test", "testing"}:
        return "mess_attendance.config.testing"

    return "mess_attendance.config.development"
