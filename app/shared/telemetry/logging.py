"""Logging configuration for the API process and batch scripts."""

import logging
import sys

from app.core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure root logging to stdout.

    Level comes from the argument, else settings.log_level, else DEBUG when
    settings.debug is True and INFO otherwise.
    """
    settings = get_settings()
    name = level or settings.log_level
    if name:
        log_level = logging.getLevelName(name.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO
    else:
        log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # SQL echo is controlled by DATABASE_ECHO, not the app log level.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)