from fastapi import APIRouter, Depends
from datetime import datetime, timezone
import time

from ..dependencies import get_activity_service, get_registry
from ..services.activity_service import ActivityService
from ..services.registry import TrackerRegistry

router = APIRouter()


@router.get("")
async def health_check(service: ActivityService = Depends(get_activity_service),
                       registry: TrackerRegistry = Depends(get_registry)):
    """Health check endpoint for monitoring."""
    start_time = time.time()
    store_ok = await service.store.ping()

    return {
        "status": "healthy" if store_ok else "unhealthy",
        "components": {
            "store": {
                "status": "connected" if store_ok else "error",
                "response_time_ms": round((time.time() - start_time) * 1000, 2)
            },
            "trackers": {
                "active_contexts": len(registry)
            }
        },
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
