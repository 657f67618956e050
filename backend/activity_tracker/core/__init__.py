from .config import Settings, get_settings
from .exceptions import (
    BaseError,
    ValidationError,
    NotFoundError,
    StoreUnavailableError,
    QueryFailureError,
    ConfigurationError
)
from .logging_config import setup_logging, get_logger
from .clock import Clock, SystemClock
from .scheduler import CheckpointTimer, APSchedulerTimer, schedule_stale_sweep, setup_scheduler, shutdown_scheduler

__all__ = [
    'Settings',
    'get_settings',
    'BaseError',
    'ValidationError',
    'NotFoundError',
    'StoreUnavailableError',
    'QueryFailureError',
    'ConfigurationError',
    'setup_logging',
    'get_logger',
    'Clock',
    'SystemClock',
    'CheckpointTimer',
    'APSchedulerTimer',
    'schedule_stale_sweep',
    'setup_scheduler',
    'shutdown_scheduler'
]
