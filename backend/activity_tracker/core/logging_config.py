import logging
import sys
from typing import Optional

from .config import get_settings

_console_handler: Optional[logging.Handler] = None


def setup_logging(log_level: Optional[str] = None) -> None:
    """Configure logging for the application."""
    global _console_handler
    settings = get_settings()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, (log_level or settings.LOG_LEVEL).upper()))

    # One console handler per process, however many apps are created
    if _console_handler is None or _console_handler not in root_logger.handlers:
        _console_handler = logging.StreamHandler(sys.stdout)
        _console_handler.setFormatter(logging.Formatter(
            settings.LOG_FORMAT,
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        root_logger.addHandler(_console_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the specified name."""
    return logging.getLogger(name)
