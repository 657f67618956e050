from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, Optional

from ..dependencies import get_registry
from ..models.activity import FlushResult, PageType
from ..services.registry import TrackerRegistry
from ..utils.validators import validate_page_indexes, validate_user_id

router = APIRouter()


class PageContext(BaseModel):
    user_id: str
    page_type: PageType
    course_id: Optional[str] = None
    module_index: Optional[int] = None
    lesson_index: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class VisibilitySignal(PageContext):
    pathname: str
    visible: bool
    focused: bool


def _flush_summary(result: Optional[FlushResult]) -> Optional[Dict[str, Any]]:
    if result is None:
        return None
    return {
        "status": result.status.value,
        "duration": result.duration,
        "attempts": result.attempts
    }


def _validate_context(data: PageContext) -> None:
    validate_user_id(data.user_id)
    validate_page_indexes(data.module_index, data.lesson_index)


@router.post("/{context_id}/start")
async def start_tracking(context_id: str, data: PageContext,
                         registry: TrackerRegistry = Depends(get_registry)):
    """Start tracking a page for a client context."""
    _validate_context(data)
    tracker = registry.get_or_create(context_id)

    result = await tracker.start_tracking(
        data.user_id,
        data.page_type,
        data.course_id,
        data.module_index,
        data.lesson_index
    )
    return {"success": True, "tracking": tracker.is_tracking, "flush": _flush_summary(result)}


@router.post("/{context_id}/stop")
async def stop_tracking(context_id: str, registry: TrackerRegistry = Depends(get_registry)):
    """Stop tracking for a client context; final flush is awaited."""
    result = await registry.stop(context_id)
    return {"success": True, "tracking": False, "flush": _flush_summary(result)}


@router.post("/{context_id}/visibility")
async def visibility_changed(context_id: str, data: VisibilitySignal,
                             registry: TrackerRegistry = Depends(get_registry)):
    """Page visibility/focus/navigation beacon."""
    _validate_context(data)

    binding = await registry.signal_visibility(
        context_id,
        data.user_id,
        data.page_type,
        data.pathname,
        data.visible,
        data.focused,
        course_id=data.course_id,
        module_index=data.module_index,
        lesson_index=data.lesson_index
    )
    return {"success": True, "tracking": binding.is_tracking}


@router.post("/{context_id}/heartbeat")
async def heartbeat(context_id: str, registry: TrackerRegistry = Depends(get_registry)):
    """Keep-alive beacon; contexts that stop sending these are swept."""
    registry.touch(context_id)
    tracker = registry.get(context_id)
    return {"success": True, "tracking": bool(tracker and tracker.is_tracking)}


@router.get("/{context_id}")
async def tracking_status(context_id: str, registry: TrackerRegistry = Depends(get_registry)):
    tracker = registry.get(context_id)
    session = tracker.current_session if tracker else None

    if session is None:
        return {"tracking": False, "session": None}

    return {
        "tracking": True,
        "session": {
            "user_id": session.user_id,
            "page_type": session.page_type.value,
            "course_id": session.course_id,
            "module_index": session.module_index,
            "lesson_index": session.lesson_index,
            "start_time_ms": session.start_time_ms
        }
    }
