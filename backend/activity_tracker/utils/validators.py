from datetime import date, datetime
from typing import Optional
import re

from ..core.exceptions import ValidationError

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_user_id(user_id: str) -> None:
    """Validate a user identifier used in document keys."""
    if not user_id or not user_id.strip():
        raise ValidationError("user_id cannot be empty")

    if len(user_id) > 128:
        raise ValidationError("user_id must not exceed 128 characters")


def validate_date_string(value: str) -> date:
    """Validate a YYYY-MM-DD date and return it."""
    if not value or not _DATE_RE.match(value):
        raise ValidationError("date must use the YYYY-MM-DD format")

    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid calendar date: {value}")


def validate_page_indexes(module_index: Optional[int], lesson_index: Optional[int]) -> None:
    """Validate optional module/lesson positions."""
    if module_index is not None and module_index < 0:
        raise ValidationError("module_index must not be negative")

    if lesson_index is not None and lesson_index < 0:
        raise ValidationError("lesson_index must not be negative")
