from .activity import (
    PageType,
    ActiveSession,
    ActivitySessionRecord,
    DailyActivityAggregate,
    FlushStatus,
    FlushResult
)

__all__ = [
    'PageType',
    'ActiveSession',
    'ActivitySessionRecord',
    'DailyActivityAggregate',
    'FlushStatus',
    'FlushResult'
]
