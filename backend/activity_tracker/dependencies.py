from fastapi import Request

from .core.exceptions import ConfigurationError
from .services.activity_service import ActivityService
from .services.registry import TrackerRegistry


def get_activity_service(request: Request) -> ActivityService:
    service = getattr(request.app.state, "activity_service", None)
    if service is None:
        raise ConfigurationError("Activity service not initialised")
    return service


def get_registry(request: Request) -> TrackerRegistry:
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise ConfigurationError("Tracker registry not initialised")
    return registry
