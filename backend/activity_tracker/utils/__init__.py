from .helpers import (
    ensure_timezone_aware,
    ms_to_datetime,
    utc_date_string,
    activity_doc_id,
    last_n_utc_dates,
    format_seconds_to_hours,
    weekday_label
)

from .validators import (
    validate_user_id,
    validate_date_string,
    validate_page_indexes
)

__all__ = [
    # Helper functions
    'ensure_timezone_aware',
    'ms_to_datetime',
    'utc_date_string',
    'activity_doc_id',
    'last_n_utc_dates',
    'format_seconds_to_hours',
    'weekday_label',

    # Validator functions
    'validate_user_id',
    'validate_date_string',
    'validate_page_indexes'
]
