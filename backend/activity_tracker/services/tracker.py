"""
Session controller: tracks one active learning session per client context and
checkpoints its elapsed time into the daily aggregate.
"""
import asyncio
import logging
from typing import Optional

from ..core.clock import Clock, SystemClock
from ..core.config import Settings, get_settings
from ..core.scheduler import CheckpointTimer
from ..models.activity import (
    ActiveSession,
    ActivitySessionRecord,
    FlushResult,
    FlushStatus,
    PageType
)
from ..utils.helpers import ms_to_datetime, utc_date_string
from .activity_service import ActivityService

logger = logging.getLogger(__name__)


class ActivityTracker:
    """Owns at most one ActiveSession and the timer that checkpoints it."""

    def __init__(self, service: ActivityService, timer: CheckpointTimer,
                 clock: Optional[Clock] = None, settings: Optional[Settings] = None,
                 context_id: str = "default"):
        self.service = service
        self.timer = timer
        self.clock = clock or service.clock or SystemClock()
        self.settings = settings or get_settings()
        self.context_id = context_id
        self._session: Optional[ActiveSession] = None
        self._flush_lock = asyncio.Lock()
        # Bumped by every start and stop; a start that sees it move has been superseded
        self._generation = 0

    @property
    def is_tracking(self) -> bool:
        return self._session is not None

    @property
    def current_session(self) -> Optional[ActiveSession]:
        return self._session

    async def start_tracking(self, user_id: str, page_type: PageType,
                             course_id: Optional[str] = None,
                             module_index: Optional[int] = None,
                             lesson_index: Optional[int] = None) -> FlushResult:
        """Start a session, flushing any session already in progress first."""
        self._generation += 1
        generation = self._generation
        await self._close_session()

        if generation != self._generation:
            logger.info(f"⏭️ Start for user {user_id} superseded while flushing [{self.context_id}]")
            return FlushResult(status=FlushStatus.IDLE)

        self._session = ActiveSession(
            user_id=user_id,
            page_type=PageType(page_type),
            start_time_ms=self.clock.now_ms(),
            course_id=course_id,
            module_index=module_index,
            lesson_index=lesson_index
        )
        self.timer.start(self._on_tick, self.settings.CHECKPOINT_INTERVAL_SECONDS)
        logger.info(f"▶️ Started tracking {page_type} for user {user_id} [{self.context_id}]")

        return await self.checkpoint()

    async def stop_tracking(self) -> Optional[FlushResult]:
        """Flush and discard the active session. Safe to call when idle."""
        self._generation += 1
        return await self._close_session()

    def discard(self) -> bool:
        """Drop the active session without flushing it. Returns whether one was open."""
        self._generation += 1
        self.timer.cancel()
        session, self._session = self._session, None
        return session is not None

    async def _close_session(self) -> Optional[FlushResult]:
        self.timer.cancel()

        session, self._session = self._session, None
        if session is None:
            return None

        result = await self._flush(session, reset_start=False)
        logger.info(f"⏹️ Stopped tracking for user {session.user_id} [{self.context_id}] ({result.status.value})")
        return result

    async def checkpoint(self) -> FlushResult:
        """Save the time elapsed since the last checkpoint without ending the session."""
        session = self._session
        if session is None:
            return FlushResult(status=FlushStatus.IDLE)
        return await self._flush(session, reset_start=True)

    async def _on_tick(self) -> None:
        result = await self.checkpoint()
        if result.status is FlushStatus.FAILED:
            logger.warning(f"⚠️ Checkpoint failed for [{self.context_id}], will retry on next tick")

    async def _flush(self, session: ActiveSession, reset_start: bool) -> FlushResult:
        async with self._flush_lock:
            now_ms = self.clock.now_ms()
            duration = (now_ms - session.start_time_ms) // 1000

            if duration < self.settings.MIN_SESSION_SECONDS:
                logger.debug(f"Skipping {duration}s flush for user {session.user_id}")
                return FlushResult(status=FlushStatus.SKIPPED, duration=duration)

            end_time = ms_to_datetime(now_ms)
            date_str = utc_date_string(end_time)
            record = ActivitySessionRecord(
                start_time=ms_to_datetime(session.start_time_ms),
                end_time=end_time,
                duration=duration,
                page_type=session.page_type,
                course_id=session.course_id,
                module_index=session.module_index,
                lesson_index=session.lesson_index
            )

            result = await self._save(session.user_id, date_str, record)

            if result.status is FlushStatus.SAVED and reset_start:
                session.start_time_ms = now_ms
            return result

    async def _save(self, user_id: str, date_str: str, record: ActivitySessionRecord) -> FlushResult:
        max_attempts = max(1, self.settings.FLUSH_MAX_ATTEMPTS)
        last_error: Optional[Exception] = None

        for attempt in range(1, max_attempts + 1):
            try:
                aggregate = await self.service.record_session(user_id, date_str, record)
                logger.info(f"✅ Saved {record.duration}s of activity for user {user_id} on {date_str}")
                return FlushResult(
                    status=FlushStatus.SAVED,
                    duration=record.duration,
                    record=record,
                    aggregate=aggregate,
                    attempts=attempt
                )
            except Exception as e:
                last_error = e
                logger.error(f"❌ Error saving activity session (attempt {attempt}/{max_attempts}): {e}",
                             exc_info=True)
                if attempt < max_attempts:
                    await asyncio.sleep(self.settings.FLUSH_RETRY_DELAY_SECONDS)

        return FlushResult(
            status=FlushStatus.FAILED,
            duration=record.duration,
            record=record,
            error=last_error,
            attempts=max_attempts
        )
