from .store import ActivityStore, InMemoryActivityStore
from .mongodb import (
    MongoActivityStore,
    connect_to_mongodb,
    close_mongodb_connection,
    create_mongo_store
)
from .activity_service import ActivityService
from .tracker import ActivityTracker
from .visibility import VisibilityTracker, is_learning_page
from .registry import TrackerRegistry

__all__ = [
    'ActivityStore',
    'InMemoryActivityStore',
    'MongoActivityStore',
    'connect_to_mongodb',
    'close_mongodb_connection',
    'create_mongo_store',
    'ActivityService',
    'ActivityTracker',
    'VisibilityTracker',
    'is_learning_page',
    'TrackerRegistry'
]
