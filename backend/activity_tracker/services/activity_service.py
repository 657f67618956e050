"""
Activity service for reading and writing daily activity aggregates.
"""
import asyncio
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as DocumentValidationError

from ..core.clock import Clock, SystemClock
from ..core.config import Settings, get_settings
from ..core.exceptions import QueryFailureError
from ..models.activity import ActivitySessionRecord, DailyActivityAggregate
from ..utils.helpers import (
    activity_doc_id,
    format_seconds_to_hours,
    last_n_utc_dates,
    ms_to_datetime,
    weekday_label
)
from .store import ActivityStore

logger = logging.getLogger(__name__)


class ActivityService:
    """Service for handling daily activity aggregates"""

    def __init__(self, store: ActivityStore, clock: Optional[Clock] = None,
                 settings: Optional[Settings] = None):
        self.store = store
        self.clock = clock or SystemClock()
        self.settings = settings or get_settings()

    async def record_session(self, user_id: str, date_str: str,
                             record: ActivitySessionRecord) -> DailyActivityAggregate:
        """Append a session record to the user's aggregate for ``date_str``.

        The total is recomputed from every stored session rather than added
        to, so any earlier drift is corrected on the next write. Store errors
        propagate to the caller.
        """
        key = activity_doc_id(user_id, date_str)
        session_doc = record.to_document()

        existing = await self.store.get(key)

        if existing:
            sessions = list(existing.get("sessions", [])) + [session_doc]
            total_seconds = sum(int(s.get("duration", 0)) for s in sessions)
            await self.store.merge(key, {
                "sessions": sessions,
                "totalSeconds": total_seconds
            })
        else:
            sessions = [session_doc]
            total_seconds = record.duration
            await self.store.merge(key, {
                "userId": user_id,
                "date": date_str,
                "sessions": sessions,
                "totalSeconds": total_seconds
            })

        return DailyActivityAggregate(
            user_id=user_id,
            date=date_str,
            sessions=sessions,
            total_seconds=total_seconds
        )

    async def _load(self, user_id: str, date_str: str) -> Optional[DailyActivityAggregate]:
        try:
            doc = await self.store.get(activity_doc_id(user_id, date_str))
            if doc is None:
                return None
            return DailyActivityAggregate.from_document(doc)
        except DocumentValidationError as e:
            raise QueryFailureError(f"Malformed activity document for {user_id} on {date_str}: {e}") from e
        except Exception as e:
            raise QueryFailureError(f"Failed to load activity for {user_id} on {date_str}: {e}") from e

    async def get_user_activity(self, user_id: str, date_str: str) -> Optional[DailyActivityAggregate]:
        """Get a user's aggregate for one UTC date, or None."""
        try:
            return await self._load(user_id, date_str)
        except QueryFailureError as e:
            logger.error(f"❌ Error getting user activity: {e.detail}")
            return None

    def today(self) -> date:
        return ms_to_datetime(self.clock.now_ms()).date()

    async def get_user_activity_this_week(self, user_id: str,
                                          today: Optional[date] = None) -> Dict[str, float]:
        """Hours of activity for the last seven UTC dates, oldest first.

        Returns an empty mapping if any single day cannot be read.
        """
        dates = last_n_utc_dates(today or self.today(), self.settings.WEEK_LENGTH_DAYS)

        try:
            aggregates = await asyncio.gather(*(self._load(user_id, d) for d in dates))
        except QueryFailureError as e:
            logger.error(f"❌ Error getting user activity this week: {e.detail}")
            return {}

        return {
            d: (aggregate.total_seconds / 3600 if aggregate else 0)
            for d, aggregate in zip(dates, aggregates)
        }

    async def get_weekly_chart(self, user_id: str, today: Optional[date] = None) -> List[Dict[str, Any]]:
        """Weekly activity as chart rows with short day labels."""
        dates = last_n_utc_dates(today or self.today(), self.settings.WEEK_LENGTH_DAYS)
        activity = await self.get_user_activity_this_week(user_id, today)
        return self.chart_rows(dates, activity)

    @staticmethod
    def chart_rows(dates: List[str], activity: Dict[str, float]) -> List[Dict[str, Any]]:
        # days missing from the mapping chart as zero
        return [
            {
                "date": d,
                "day": weekday_label(d),
                "hours": format_seconds_to_hours(activity.get(d, 0) * 3600)
            }
            for d in dates
        ]

    @staticmethod
    def format_seconds_to_hours(seconds: float) -> float:
        return format_seconds_to_hours(seconds)
