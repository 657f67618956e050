"""
Drives an ActivityTracker from page visibility, focus and navigation signals.
"""
import logging
from typing import Optional

from ..core.config import Settings, get_settings
from ..models.activity import PageType
from .tracker import ActivityTracker

logger = logging.getLogger(__name__)


def is_learning_page(pathname: str, settings: Optional[Settings] = None) -> bool:
    """Only course and quiz pages are tracked."""
    settings = settings or get_settings()
    return any(pathname.startswith(prefix) for prefix in settings.LEARNING_PATH_PREFIXES)


class VisibilityTracker:
    """Page lifecycle binding for one mounted learning page.

    Tracking runs while the page is both visible and focused. The
    ``is_tracking`` flag mirrors what this binding asked for, so repeated
    focus events do not restart a running session.
    """

    def __init__(self, tracker: ActivityTracker, user_id: Optional[str], page_type: PageType,
                 pathname: str, course_id: Optional[str] = None,
                 module_index: Optional[int] = None, lesson_index: Optional[int] = None,
                 enabled: bool = True, settings: Optional[Settings] = None):
        self.tracker = tracker
        self.user_id = user_id
        self.page_type = page_type
        self.pathname = pathname
        self.course_id = course_id
        self.module_index = module_index
        self.lesson_index = lesson_index
        self.enabled = enabled
        self.settings = settings or get_settings()
        self.is_tracking = False
        self.mounted = False

    @property
    def eligible(self) -> bool:
        return bool(self.enabled and self.user_id and is_learning_page(self.pathname, self.settings))

    async def _start(self) -> None:
        if self.is_tracking:
            return
        await self.tracker.start_tracking(
            self.user_id,
            self.page_type,
            self.course_id,
            self.module_index,
            self.lesson_index
        )
        self.is_tracking = True

    async def _stop(self) -> None:
        if not self.is_tracking:
            return
        self.is_tracking = False
        await self.tracker.stop_tracking()

    async def activate(self, visible: bool, focused: bool) -> None:
        """Mount the binding; starts tracking right away when the page is active."""
        if not self.eligible:
            logger.debug(f"Not tracking {self.pathname!r}: disabled, anonymous or not a learning page")
            return

        self.mounted = True
        if visible and focused:
            await self._start()

    async def on_visibility_change(self, visible: bool, focused: bool) -> None:
        if not self.mounted:
            return
        if visible and focused:
            await self._start()
        else:
            await self._stop()

    async def on_focus(self) -> None:
        if self.mounted:
            await self._start()

    async def on_blur(self) -> None:
        if self.mounted:
            await self._stop()

    async def on_navigation(self, pathname: str, page_type: Optional[PageType] = None,
                            course_id: Optional[str] = None, module_index: Optional[int] = None,
                            lesson_index: Optional[int] = None,
                            visible: bool = True, focused: bool = True) -> None:
        """Re-bind to a new page context, ending the previous page's session."""
        await self.deactivate()

        self.pathname = pathname
        if page_type is not None:
            self.page_type = page_type
        self.course_id = course_id
        self.module_index = module_index
        self.lesson_index = lesson_index

        await self.activate(visible, focused)

    async def deactivate(self) -> None:
        """Unmount the binding and stop tracking."""
        await self._stop()
        self.mounted = False
