"""
Activity models for the document store.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PageType(str, Enum):
    COURSE = "course"
    LESSON = "lesson"
    QUIZ = "quiz"


@dataclass
class ActiveSession:
    """The one in-progress session of a tracker.

    ``start_time_ms`` moves forward after every successful checkpoint, so the
    elapsed time is always measured since the last save.
    """
    user_id: str
    page_type: PageType
    start_time_ms: int
    course_id: Optional[str] = None
    module_index: Optional[int] = None
    lesson_index: Optional[int] = None


class ActivitySessionRecord(BaseModel):
    start_time: datetime
    end_time: datetime
    duration: int
    page_type: PageType
    course_id: Optional[str] = None
    module_index: Optional[int] = None
    lesson_index: Optional[int] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        use_enum_values=True
    )

    def to_document(self) -> Dict[str, Any]:
        """Store representation; absent optional fields are omitted, never null."""
        return self.model_dump(by_alias=True, exclude_none=True)


class DailyActivityAggregate(BaseModel):
    user_id: str
    date: str
    sessions: List[ActivitySessionRecord] = Field(default_factory=list)
    total_seconds: int = 0
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True
    )

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "DailyActivityAggregate":
        return cls.model_validate({k: v for k, v in doc.items() if k != "_id"})

    @property
    def total_hours(self) -> float:
        return self.total_seconds / 3600


class FlushStatus(str, Enum):
    SAVED = "saved"
    SKIPPED = "skipped"
    FAILED = "failed"
    IDLE = "idle"


@dataclass
class FlushResult:
    """Outcome of one checkpoint flush."""
    status: FlushStatus
    duration: int = 0
    record: Optional[ActivitySessionRecord] = None
    aggregate: Optional[DailyActivityAggregate] = None
    error: Optional[Exception] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.status is not FlushStatus.FAILED
