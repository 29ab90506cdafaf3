"""Logging setup shared by the API and the services."""

import logging

from campus_energy.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | None = None) -> None:
    """Configure the package logger once with a console handler."""
    logger = logging.getLogger("campus_energy")
    logger.setLevel((level or settings.LOG_LEVEL).upper())

    # Avoid duplicate handlers when the app is started more than once
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(handler)
