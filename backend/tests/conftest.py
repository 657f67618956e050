import asyncio
import pytest
from datetime import datetime, timezone
from typing import Optional

from activity_tracker.core.clock import Clock
from activity_tracker.core.config import Settings
from activity_tracker.core.exceptions import StoreUnavailableError
from activity_tracker.core.scheduler import CheckpointTimer
from activity_tracker.services.activity_service import ActivityService
from activity_tracker.services.store import InMemoryActivityStore
from activity_tracker.services.tracker import ActivityTracker

T0 = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock(Clock):
    def __init__(self, start: datetime = T0):
        self.current_ms = int(start.timestamp() * 1000)

    def now_ms(self) -> int:
        return self.current_ms

    def advance(self, seconds: float) -> None:
        self.current_ms += int(seconds * 1000)

    def set(self, moment: datetime) -> None:
        self.current_ms = int(moment.timestamp() * 1000)


class ManualTimer(CheckpointTimer):
    """Timer whose ticks are fired by the test."""

    def __init__(self, job_id: str = "manual"):
        self.job_id = job_id
        self.callback = None
        self.interval: Optional[float] = None
        self.start_calls = 0
        self.cancel_calls = 0

    def start(self, callback, interval_seconds: float) -> None:
        self.callback = callback
        self.interval = interval_seconds
        self.start_calls += 1

    def cancel(self) -> None:
        self.callback = None
        self.cancel_calls += 1

    @property
    def active(self) -> bool:
        return self.callback is not None

    async def fire(self) -> None:
        assert self.callback is not None, "timer is not running"
        await self.callback()


class FlakyStore(InMemoryActivityStore):
    """In-memory store that can be switched to fail reads and writes."""

    def __init__(self):
        super().__init__()
        self.fail_reads = False
        self.fail_writes = False
        self.fail_keys = set()
        self.gets = 0
        self.merges = 0
        # Set merge_gate to hold writes until the test releases it
        self.merge_gate: Optional[asyncio.Event] = None
        self.merge_waiting = asyncio.Event()

    async def get(self, key):
        self.gets += 1
        if self.fail_reads or key in self.fail_keys:
            raise StoreUnavailableError(f"read failed for {key}")
        return await super().get(key)

    async def merge(self, key, fields):
        self.merges += 1
        if self.fail_writes:
            raise StoreUnavailableError(f"write failed for {key}")
        if self.merge_gate is not None:
            self.merge_waiting.set()
            await self.merge_gate.wait()
        await super().merge(key, fields)


@pytest.fixture
def settings():
    return Settings(
        STORE_BACKEND="memory",
        CHECKPOINT_INTERVAL_SECONDS=60,
        MIN_SESSION_SECONDS=5,
        FLUSH_MAX_ATTEMPTS=1,
        FLUSH_RETRY_DELAY_SECONDS=0
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return FlakyStore()


@pytest.fixture
def timer():
    return ManualTimer()


@pytest.fixture
def service(store, clock, settings):
    return ActivityService(store, clock=clock, settings=settings)


@pytest.fixture
def tracker(service, timer, clock, settings):
    return ActivityTracker(service, timer, clock=clock, settings=settings, context_id="tab-1")
