import pytest

from activity_tracker.models.activity import PageType
from activity_tracker.services.visibility import VisibilityTracker, is_learning_page


@pytest.fixture
def binding(tracker, settings):
    return VisibilityTracker(
        tracker, "user-1", PageType.LESSON, "/courses/c1/modules/0/lessons/2",
        course_id="c1", module_index=0, lesson_index=2, settings=settings
    )


@pytest.mark.parametrize("path,expected", [
    ("/courses/c1", True),
    ("/quizzes/c1/quiz", True),
    ("/profile", False),
    ("/", False),
])
def test_is_learning_page(path, expected, settings):
    assert is_learning_page(path, settings) is expected


async def test_activate_starts_when_visible_and_focused(binding, tracker):
    await binding.activate(visible=True, focused=True)

    assert binding.is_tracking
    assert tracker.current_session.lesson_index == 2


async def test_activate_in_background_waits_for_focus(binding, tracker):
    await binding.activate(visible=True, focused=False)
    assert not tracker.is_tracking

    await binding.on_focus()
    assert tracker.is_tracking


async def test_blur_stops_and_flushes(binding, tracker, clock, service):
    await binding.activate(True, True)
    clock.advance(45)

    await binding.on_blur()

    assert not tracker.is_tracking
    aggregate = await service.get_user_activity("user-1", "2026-10-19")
    assert aggregate.total_seconds == 45


async def test_hidden_page_stops_tracking(binding, tracker):
    await binding.activate(True, True)
    await binding.on_visibility_change(visible=False, focused=True)
    assert not tracker.is_tracking


async def test_rapid_focus_events_do_not_restart_session(binding, tracker, timer):
    await binding.activate(True, True)
    await binding.on_focus()
    await binding.on_focus()

    assert timer.start_calls == 1


async def test_non_learning_page_is_ignored(tracker, settings):
    binding = VisibilityTracker(tracker, "user-1", PageType.COURSE, "/leaderboard", settings=settings)

    await binding.activate(True, True)
    await binding.on_focus()

    assert not tracker.is_tracking


async def test_disabled_or_anonymous_is_ignored(tracker, settings):
    disabled = VisibilityTracker(tracker, "user-1", PageType.COURSE, "/courses/c1",
                                 enabled=False, settings=settings)
    anonymous = VisibilityTracker(tracker, None, PageType.COURSE, "/courses/c1", settings=settings)

    await disabled.activate(True, True)
    await anonymous.activate(True, True)

    assert not tracker.is_tracking


async def test_navigation_files_previous_page_and_tracks_new_one(binding, tracker, clock, service):
    await binding.activate(True, True)
    clock.advance(30)

    await binding.on_navigation("/quizzes/c1/quiz", PageType.QUIZ, course_id="c1")

    aggregate = await service.get_user_activity("user-1", "2026-10-19")
    assert aggregate.sessions[0].page_type == "lesson"
    assert aggregate.sessions[0].lesson_index == 2
    assert tracker.current_session.page_type is PageType.QUIZ
    assert tracker.current_session.lesson_index is None


async def test_deactivate_stops_tracking(binding, tracker):
    await binding.activate(True, True)
    await binding.deactivate()

    assert not tracker.is_tracking
    assert not binding.mounted
    await binding.on_focus()
    assert not tracker.is_tracking
