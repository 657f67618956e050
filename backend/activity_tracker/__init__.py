"""
Learning activity session tracking and daily aggregation.
"""
from .core.clock import Clock, SystemClock
from .core.config import Settings, get_settings
from .core.exceptions import QueryFailureError, StoreUnavailableError
from .core.scheduler import APSchedulerTimer, CheckpointTimer
from .models.activity import (
    ActiveSession,
    ActivitySessionRecord,
    DailyActivityAggregate,
    FlushResult,
    FlushStatus,
    PageType
)
from .services.activity_service import ActivityService
from .services.mongodb import MongoActivityStore, create_mongo_store
from .services.store import ActivityStore, InMemoryActivityStore
from .services.tracker import ActivityTracker
from .services.visibility import VisibilityTracker
from .utils.helpers import format_seconds_to_hours

__version__ = "1.0.0"

__all__ = [
    'Clock',
    'SystemClock',
    'Settings',
    'get_settings',
    'QueryFailureError',
    'StoreUnavailableError',
    'APSchedulerTimer',
    'CheckpointTimer',
    'ActiveSession',
    'ActivitySessionRecord',
    'DailyActivityAggregate',
    'FlushResult',
    'FlushStatus',
    'PageType',
    'ActivityService',
    'MongoActivityStore',
    'create_mongo_store',
    'ActivityStore',
    'InMemoryActivityStore',
    'ActivityTracker',
    'VisibilityTracker',
    'format_seconds_to_hours'
]
