from datetime import date, datetime, timedelta, timezone
from typing import List, Optional
import math
import logging

logger = logging.getLogger(__name__)


def ensure_timezone_aware(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure a datetime object is timezone-aware by adding UTC timezone if needed."""
    if dt and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def ms_to_datetime(epoch_ms: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)


def utc_date_string(moment: datetime) -> str:
    """UTC calendar date of a datetime as YYYY-MM-DD."""
    return ensure_timezone_aware(moment).astimezone(timezone.utc).strftime("%Y-%m-%d")


def activity_doc_id(user_id: str, date_str: str) -> str:
    """Document key of a user's daily activity aggregate."""
    return f"{user_id}-{date_str}"


def last_n_utc_dates(today: date, days: int = 7) -> List[str]:
    """The `days` calendar dates ending at `today`, oldest first."""
    return [
        (today - timedelta(days=offset)).strftime("%Y-%m-%d")
        for offset in range(days - 1, -1, -1)
    ]


def format_seconds_to_hours(seconds: float) -> float:
    """Convert seconds to hours rounded half-up to two decimal places."""
    return math.floor(seconds / 3600 * 100 + 0.5) / 100


_WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def weekday_label(date_str: str) -> str:
    """Short Mon..Sun label for a YYYY-MM-DD date."""
    return _WEEKDAY_LABELS[datetime.strptime(date_str, "%Y-%m-%d").weekday()]
