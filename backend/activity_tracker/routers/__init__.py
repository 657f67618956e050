from .health import router as health_router
from .activity import router as activity_router
from .tracking import router as tracking_router

__all__ = [
    'health_router',
    'activity_router',
    'tracking_router'
]
