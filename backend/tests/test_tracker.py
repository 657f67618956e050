import asyncio
import pytest
from datetime import datetime, timezone

from activity_tracker.models.activity import FlushStatus, PageType
from activity_tracker.services.tracker import ActivityTracker
from activity_tracker.utils.helpers import activity_doc_id

from conftest import T0, ManualTimer

TODAY_KEY = activity_doc_id("user-1", "2026-10-19")


async def test_start_opens_session_and_schedules_checkpoints(tracker, timer, store):
    result = await tracker.start_tracking("user-1", PageType.LESSON, "course-9", 2, 3)

    assert tracker.is_tracking
    assert tracker.current_session.start_time_ms == int(T0.timestamp() * 1000)
    assert timer.active
    assert timer.interval == 60
    # the immediate checkpoint has nothing to save yet
    assert result.status is FlushStatus.SKIPPED
    assert len(store) == 0


async def test_tick_after_sixty_seconds_saves_and_resets_start(tracker, timer, clock, service):
    await tracker.start_tracking("user-1", PageType.COURSE, "course-9")

    clock.advance(60)
    await timer.fire()

    aggregate = await service.get_user_activity("user-1", "2026-10-19")
    assert aggregate is not None
    assert [s.duration for s in aggregate.sessions] == [60]
    assert aggregate.total_seconds == 60
    assert tracker.is_tracking
    assert tracker.current_session.start_time_ms == clock.now_ms()


async def test_stop_before_floor_persists_nothing(tracker, clock, store):
    await tracker.start_tracking("user-1", PageType.QUIZ)

    clock.advance(3)
    result = await tracker.stop_tracking()

    assert result.status is FlushStatus.SKIPPED
    assert result.duration == 3
    assert len(store) == 0
    assert store.merges == 0
    assert not tracker.is_tracking


async def test_two_checkpoints_same_day_sum_up(tracker, timer, clock, service):
    await tracker.start_tracking("user-1", PageType.LESSON, "course-9", 0, 1)

    clock.advance(60)
    await timer.fire()
    clock.advance(42)
    await tracker.stop_tracking()

    aggregate = await service.get_user_activity("user-1", "2026-10-19")
    assert len(aggregate.sessions) == 2
    assert aggregate.total_seconds == 102
    assert aggregate.total_seconds == sum(s.duration for s in aggregate.sessions)


async def test_session_spanning_midnight_is_filed_under_flush_date(tracker, clock, service, store):
    clock.set(datetime(2026, 10, 19, 23, 59, 50, tzinfo=timezone.utc))
    await tracker.start_tracking("user-1", PageType.LESSON)

    clock.set(datetime(2026, 10, 20, 0, 0, 10, tzinfo=timezone.utc))
    result = await tracker.stop_tracking()

    assert result.status is FlushStatus.SAVED
    assert result.duration == 20
    assert activity_doc_id("user-1", "2026-10-19") not in store
    aggregate = await service.get_user_activity("user-1", "2026-10-20")
    assert aggregate.total_seconds == 20
    assert aggregate.sessions[0].start_time == datetime(2026, 10, 19, 23, 59, 50, tzinfo=timezone.utc)


async def test_stop_is_idempotent(tracker, clock, store):
    await tracker.start_tracking("user-1", PageType.COURSE)
    clock.advance(30)

    first = await tracker.stop_tracking()
    second = await tracker.stop_tracking()

    assert first.status is FlushStatus.SAVED
    assert second is None
    assert store.merges == 1


async def test_stop_when_idle_is_a_noop(tracker, store):
    assert await tracker.stop_tracking() is None
    assert store.gets == 0


async def test_start_while_tracking_flushes_previous_session(tracker, timer, clock, service):
    await tracker.start_tracking("user-1", PageType.LESSON, "course-1", 0, 0)
    clock.advance(25)

    await tracker.start_tracking("user-1", PageType.QUIZ, "course-1")

    aggregate = await service.get_user_activity("user-1", "2026-10-19")
    assert len(aggregate.sessions) == 1
    assert aggregate.sessions[0].page_type == "lesson"
    assert aggregate.sessions[0].duration == 25
    assert tracker.current_session.page_type is PageType.QUIZ
    assert tracker.current_session.start_time_ms == clock.now_ms()
    assert timer.cancel_calls == 2
    assert timer.start_calls == 2


async def test_optional_identifiers_are_omitted_from_documents(tracker, clock, store):
    await tracker.start_tracking("user-1", PageType.COURSE, "course-9")
    clock.advance(10)
    await tracker.stop_tracking()

    doc = await store.get(TODAY_KEY)
    session = doc["sessions"][0]
    assert session["courseId"] == "course-9"
    assert "moduleIndex" not in session
    assert "lessonIndex" not in session
    assert set(doc) >= {"userId", "date", "sessions", "totalSeconds", "updatedAt"}


async def test_failed_tick_keeps_session_and_timer(tracker, timer, clock, store):
    await tracker.start_tracking("user-1", PageType.LESSON)
    start_ms = tracker.current_session.start_time_ms

    store.fail_writes = True
    clock.advance(60)
    result = await tracker.checkpoint()

    assert result.status is FlushStatus.FAILED
    assert isinstance(result.error, Exception)
    assert tracker.is_tracking
    assert timer.active
    assert tracker.current_session.start_time_ms == start_ms


async def test_next_tick_after_failure_saves_the_whole_window(tracker, timer, clock, store, service):
    await tracker.start_tracking("user-1", PageType.LESSON)

    store.fail_writes = True
    clock.advance(60)
    await timer.fire()

    store.fail_writes = False
    clock.advance(60)
    await timer.fire()

    aggregate = await service.get_user_activity("user-1", "2026-10-19")
    assert [s.duration for s in aggregate.sessions] == [120]


async def test_stop_never_raises_on_store_failure(tracker, clock, store):
    await tracker.start_tracking("user-1", PageType.QUIZ)
    store.fail_reads = True
    clock.advance(30)

    result = await tracker.stop_tracking()

    assert result.status is FlushStatus.FAILED
    assert not tracker.is_tracking


async def test_retry_policy_retries_failed_writes(service, clock, settings, store):
    settings.FLUSH_MAX_ATTEMPTS = 3
    timer = ManualTimer()
    tracker = ActivityTracker(service, timer, clock=clock, settings=settings)

    calls = {"n": 0}
    original_merge = store.merge

    async def flaky_merge(key, fields):
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("transient")
        await original_merge(key, fields)

    store.merge = flaky_merge

    await tracker.start_tracking("user-1", PageType.COURSE)
    clock.advance(20)
    result = await tracker.stop_tracking()

    assert result.status is FlushStatus.SAVED
    assert result.attempts == 2


async def test_tick_after_stop_is_idle(tracker, clock):
    await tracker.start_tracking("user-1", PageType.COURSE)
    clock.advance(10)
    await tracker.stop_tracking()

    result = await tracker.checkpoint()
    assert result.status is FlushStatus.IDLE


async def test_back_to_back_ticks_do_not_save_near_zero_durations(tracker, timer, clock, store):
    await tracker.start_tracking("user-1", PageType.LESSON)
    clock.advance(60)
    await timer.fire()
    clock.advance(2)
    await timer.fire()

    doc = await store.get(TODAY_KEY)
    assert len(doc["sessions"]) == 1


@pytest.mark.parametrize("elapsed,saved", [(4.999, False), (5, True)])
async def test_five_second_floor(tracker, clock, store, elapsed, saved):
    await tracker.start_tracking("user-1", PageType.LESSON)
    clock.advance(elapsed)
    await tracker.stop_tracking()

    assert (TODAY_KEY in store) is saved


def hold_merges(store):
    """Block store writes; returns the event that releases them."""
    gate = asyncio.Event()
    store.merge_gate = gate
    store.merge_waiting.clear()
    return gate


async def test_stop_during_in_flight_tick_counts_window_once(tracker, timer, clock, store, service):
    await tracker.start_tracking("user-1", PageType.LESSON)
    clock.advance(60)

    gate = hold_merges(store)
    tick = asyncio.create_task(timer.fire())
    await asyncio.wait_for(store.merge_waiting.wait(), 1)

    stop = asyncio.create_task(tracker.stop_tracking())
    await asyncio.sleep(0)
    assert not stop.done()

    gate.set()
    await tick
    result = await stop

    # the tick already covered the window, so the final flush has nothing left
    assert result.status is FlushStatus.SKIPPED
    aggregate = await service.get_user_activity("user-1", "2026-10-19")
    assert [s.duration for s in aggregate.sessions] == [60]
    assert aggregate.total_seconds == 60
    assert not timer.active


async def test_stop_while_start_is_flushing_previous_session_wins(tracker, timer, clock, store, service):
    await tracker.start_tracking("user-1", PageType.LESSON, "course-1", 0, 0)
    clock.advance(30)

    gate = hold_merges(store)
    start = asyncio.create_task(tracker.start_tracking("user-1", PageType.QUIZ, "course-1"))
    await asyncio.wait_for(store.merge_waiting.wait(), 1)

    assert await tracker.stop_tracking() is None

    gate.set()
    result = await start

    assert result.status is FlushStatus.IDLE
    assert not tracker.is_tracking
    assert not timer.active
    aggregate = await service.get_user_activity("user-1", "2026-10-19")
    assert [s.duration for s in aggregate.sessions] == [30]


async def test_overlapping_starts_leave_only_the_latest_session(tracker, timer, clock, store):
    await tracker.start_tracking("user-1", PageType.LESSON, "course-1", 0, 0)
    clock.advance(30)

    gate = hold_merges(store)
    first = asyncio.create_task(tracker.start_tracking("user-1", PageType.QUIZ, "course-1"))
    await asyncio.wait_for(store.merge_waiting.wait(), 1)
    second = asyncio.create_task(tracker.start_tracking("user-1", PageType.COURSE, "course-2"))
    await asyncio.sleep(0)

    gate.set()
    superseded = await first
    await second

    assert superseded.status is FlushStatus.IDLE
    assert tracker.current_session.page_type is PageType.COURSE
    assert tracker.current_session.course_id == "course-2"
    assert timer.active
    assert timer.start_calls == 2


async def test_discard_drops_session_without_writing(tracker, timer, clock, store):
    await tracker.start_tracking("user-1", PageType.LESSON)
    clock.advance(45)

    assert tracker.discard() is True
    assert tracker.discard() is False

    assert not tracker.is_tracking
    assert not timer.active
    assert store.merges == 0
