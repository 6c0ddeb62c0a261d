import logging
import sys

from wordstats.constants.config import LOG_FORMAT
from wordstats.core.config import settings

_to_stderr = False


class _ConsoleHandler(logging.StreamHandler):
    """StreamHandler that resolves sys.stdout / sys.stderr when a record is emitted."""

    @property
    def stream(self):
        return sys.stderr if _to_stderr else sys.stdout

    @stream.setter
    def stream(self, value) -> None:
        pass


def get_logger(name: str) -> logging.Logger:
    """
    Returns a structured logger for any module in the pipeline.

    The initial level is settings.LOG_LEVEL (environment or .env).

    Usage:
        logger = get_logger(__name__)
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        logger.setLevel(settings.LOG_LEVEL)

        handler = _ConsoleHandler()
        formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        handler.setFormatter(formatter)

        logger.addHandler(handler)
        logger.propagate = False

    return logger


def set_log_level(level: str) -> None:
    """Apply a level to every logger already created under the wordstats namespace."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")

    for name, existing in logging.Logger.manager.loggerDict.items():
        if name.startswith("wordstats") and isinstance(existing, logging.Logger):
            existing.setLevel(numeric)


def route_logs_to_stderr(enabled: bool = True) -> None:
    """Send wordstats log lines to stderr instead of stdout (used when stdout carries JSON)."""
    global _to_stderr
    _to_stderr = enabled
