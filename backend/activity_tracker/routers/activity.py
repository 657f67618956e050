from fastapi import APIRouter, Depends, Query
from typing import Optional

from ..core.exceptions import NotFoundError
from ..dependencies import get_activity_service
from ..services.activity_service import ActivityService
from ..utils.helpers import format_seconds_to_hours
from ..utils.validators import validate_date_string, validate_user_id

router = APIRouter()


@router.get("/{user_id}/week")
async def get_activity_this_week(user_id: str,
                                 today: Optional[str] = Query(None, description="UTC date YYYY-MM-DD"),
                                 service: ActivityService = Depends(get_activity_service)):
    """Hours of activity over the last seven UTC days."""
    validate_user_id(user_id)
    today_date = validate_date_string(today) if today else None

    activity = await service.get_user_activity_this_week(user_id, today_date)
    chart = service.chart_rows(list(activity), activity)

    return {
        "user_id": user_id,
        "hours": activity,
        "days": chart,
        "total_hours": format_seconds_to_hours(sum(activity.values()) * 3600)
    }


@router.get("/{user_id}/{date}")
async def get_daily_activity(user_id: str, date: str,
                             service: ActivityService = Depends(get_activity_service)):
    """A user's daily activity aggregate."""
    validate_user_id(user_id)
    validate_date_string(date)

    aggregate = await service.get_user_activity(user_id, date)
    if aggregate is None:
        raise NotFoundError(f"No activity for {user_id} on {date}")

    data = aggregate.model_dump(mode="json", by_alias=True, exclude_none=True)
    data["totalHours"] = format_seconds_to_hours(aggregate.total_seconds)
    return data
