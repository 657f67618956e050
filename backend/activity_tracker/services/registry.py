"""
Per-client-context trackers for the HTTP tracking endpoints.
"""
import logging
from typing import Callable, Dict, List, Optional

from ..core.clock import Clock, SystemClock
from ..core.config import Settings, get_settings
from ..core.scheduler import CheckpointTimer
from ..models.activity import PageType
from .activity_service import ActivityService
from .tracker import ActivityTracker
from .visibility import VisibilityTracker

logger = logging.getLogger(__name__)

TimerFactory = Callable[[str], CheckpointTimer]


class TrackerRegistry:
    """One ActivityTracker (and page binding) per client context id."""

    def __init__(self, service: ActivityService, timer_factory: TimerFactory,
                 clock: Optional[Clock] = None, settings: Optional[Settings] = None):
        self.service = service
        self.timer_factory = timer_factory
        self.clock = clock or service.clock or SystemClock()
        self.settings = settings or get_settings()
        self._trackers: Dict[str, ActivityTracker] = {}
        self._bindings: Dict[str, VisibilityTracker] = {}
        self._last_seen: Dict[str, int] = {}

    def get(self, context_id: str) -> Optional[ActivityTracker]:
        return self._trackers.get(context_id)

    def touch(self, context_id: str) -> None:
        """Record a beacon from the context."""
        if context_id in self._trackers:
            self._last_seen[context_id] = self.clock.now_ms()

    def get_or_create(self, context_id: str) -> ActivityTracker:
        tracker = self._trackers.get(context_id)
        if tracker is None:
            tracker = ActivityTracker(
                self.service,
                self.timer_factory(f"checkpoint:{context_id}"),
                clock=self.clock,
                settings=self.settings,
                context_id=context_id
            )
            self._trackers[context_id] = tracker
            logger.debug(f"Created tracker for context {context_id}")
        self._last_seen[context_id] = self.clock.now_ms()
        return tracker

    async def signal_visibility(self, context_id: str, user_id: str, page_type: PageType,
                                pathname: str, visible: bool, focused: bool,
                                course_id: Optional[str] = None,
                                module_index: Optional[int] = None,
                                lesson_index: Optional[int] = None) -> VisibilityTracker:
        """Feed a page visibility beacon to the context's binding."""
        self.touch(context_id)
        binding = self._bindings.get(context_id)
        page = (pathname, PageType(page_type), course_id, module_index, lesson_index)

        if binding is not None and binding.user_id != user_id:
            await binding.deactivate()
            binding = None

        if binding is None:
            binding = VisibilityTracker(
                self.get_or_create(context_id),
                user_id,
                PageType(page_type),
                pathname,
                course_id=course_id,
                module_index=module_index,
                lesson_index=lesson_index,
                settings=self.settings
            )
            self._bindings[context_id] = binding
            await binding.activate(visible, focused)
        elif page != (binding.pathname, binding.page_type, binding.course_id,
                      binding.module_index, binding.lesson_index):
            await binding.on_navigation(pathname, PageType(page_type), course_id,
                                        module_index, lesson_index, visible, focused)
        else:
            await binding.on_visibility_change(visible, focused)

        return binding

    def _forget(self, context_id: str) -> Optional[ActivityTracker]:
        binding = self._bindings.pop(context_id, None)
        if binding is not None:
            binding.is_tracking = False
            binding.mounted = False
        self._last_seen.pop(context_id, None)
        return self._trackers.pop(context_id, None)

    async def stop(self, context_id: str):
        """Stop and forget a context's tracker."""
        tracker = self._forget(context_id)
        if tracker is None:
            return None
        return await tracker.stop_tracking()

    async def sweep_stale(self) -> List[str]:
        """Drop contexts that sent no beacon for STALE_CONTEXT_CHECKPOINTS intervals.

        A client that vanished without a stop beacon cannot say when it left,
        so its open window is discarded rather than flushed.
        """
        max_idle_ms = int(self.settings.STALE_CONTEXT_CHECKPOINTS
                          * self.settings.CHECKPOINT_INTERVAL_SECONDS * 1000)
        now_ms = self.clock.now_ms()
        stale = [
            context_id for context_id in list(self._trackers)
            if now_ms - self._last_seen.get(context_id, now_ms) > max_idle_ms
        ]

        for context_id in stale:
            tracker = self._forget(context_id)
            if tracker is not None and tracker.discard():
                logger.warning(f"🧹 Dropped stale tracking session [{context_id}]")
        return stale

    async def stop_all(self) -> None:
        for context_id in list(self._trackers):
            await self.stop(context_id)

    def __len__(self) -> int:
        return len(self._trackers)
