from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from typing import Awaitable, Callable, Optional
import logging

logger = logging.getLogger(__name__)

TickCallback = Callable[[], Awaitable[None]]
STALE_SWEEP_JOB_ID = "sweep_stale_contexts"

_scheduler: Optional[AsyncIOScheduler] = None


class CheckpointTimer:
    """A single repeating timer handle owned by one tracker."""

    def start(self, callback: TickCallback, interval_seconds: float) -> None:
        raise NotImplementedError

    def cancel(self) -> None:
        raise NotImplementedError

    @property
    def active(self) -> bool:
        raise NotImplementedError


class APSchedulerTimer(CheckpointTimer):
    """Checkpoint timer backed by an interval job on an AsyncIOScheduler."""

    def __init__(self, scheduler: AsyncIOScheduler, job_id: str):
        self.scheduler = scheduler
        self.job_id = job_id
        self._active = False

    def start(self, callback: TickCallback, interval_seconds: float) -> None:
        # replace_existing keeps the one-handle-per-tracker rule if start is called twice
        self.scheduler.add_job(
            callback,
            IntervalTrigger(seconds=interval_seconds),
            id=self.job_id,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._active = True
        logger.debug(f"⏰ Checkpoint job {self.job_id} scheduled every {interval_seconds}s")

    def cancel(self) -> None:
        if not self._active:
            return
        try:
            self.scheduler.remove_job(self.job_id)
        except JobLookupError:
            logger.debug(f"Checkpoint job {self.job_id} already removed")
        self._active = False

    @property
    def active(self) -> bool:
        return self._active


def schedule_stale_sweep(scheduler: AsyncIOScheduler, callback: Callable[[], Awaitable[object]],
                         interval_seconds: float) -> None:
    """Run the registry's stale-context sweep on a fixed interval."""
    scheduler.add_job(
        callback,
        IntervalTrigger(seconds=interval_seconds),
        id=STALE_SWEEP_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    logger.info(f"✅ Stale context sweep scheduled every {interval_seconds}s")


def setup_scheduler() -> AsyncIOScheduler:
    """Return the shared scheduler, creating it on first use."""
    global _scheduler
    if _scheduler is None:
        _scheduler = AsyncIOScheduler(timezone="UTC")
    return _scheduler


def shutdown_scheduler() -> None:
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        _scheduler.shutdown(wait=False)
        logger.info("✅ Scheduler shut down successfully")
    _scheduler = None
