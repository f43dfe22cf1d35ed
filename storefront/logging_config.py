"""
Logging setup for the API process.
"""
import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

# Libraries that are noisy at DEBUG
QUIET_LOGGERS = ('azure.core.pipeline.policies.http_logging_policy', 'aiosqlite')


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging once at startup.

    Args:
        level: Log level name; defaults to the configured log_level
    """
    if level is None:
        from .config import get_settings
        level = get_settings().log_level

    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
