# app/core/logging.py
import logging
import sys

from app.core.config import Settings, settings as default_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(app_settings: Settings | None = None) -> None:
    app_settings = app_settings or default_settings
    logging.basicConfig(
        level=app_settings.LOG_LEVEL.upper(),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # SQL echo goes through its own logger; keep it quiet outside development
    if app_settings.ENVIRONMENT != "development":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
