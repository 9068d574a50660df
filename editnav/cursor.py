"""Back/forward cursor over the edit history.

``steps_back`` counts slots away from the newest entry; ``0`` means the user
is not navigating. Selection changes shortly after a navigation move are the
move echoing back from the host and must not reset the cursor.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from .model import Edit, Location
from .paths import same_path
from .store import EditStore

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_WINDOW_MS = 500


def wall_clock_ms() -> float:
    return time.time() * 1000.0


def _is_at(edit: Edit, location: Location | None) -> bool:
    return location is not None and edit.line == location.line and same_path(edit.file_path, location.file_path)


class NavigationCursor:
    """Step counter over an ``EditStore`` with a post-move ignore window."""

    def __init__(
        self,
        store: EditStore,
        *,
        ignore_window_ms: float = DEFAULT_IGNORE_WINDOW_MS,
        clock: Callable[[], float] = wall_clock_ms,
    ) -> None:
        self.store = store
        self.ignore_window_ms = ignore_window_ms
        self._clock = clock

    @property
    def steps_back(self) -> int:
        return self.store.navigation.steps_back

    def current_entry(self) -> Edit | None:
        """Return the entry at the cursor's stack position, if navigating."""
        return self.store.entry_at_steps_back(self.store.navigation.steps_back)

    def previous(self, current: Location | None, restrict_to_current_file: bool = False) -> Edit | None:
        """Step toward older entries and return the one to move to.

        Every examined slot counts as a step, skipped or not. When nothing
        qualifies the step count is restored and ``None`` is returned.
        """
        state = self.store.navigation
        start = state.steps_back
        total = len(self.store)
        while state.steps_back < total:
            state.steps_back += 1
            edit = self.store.entry_at_steps_back(state.steps_back)
            if self._qualifies(edit, current, restrict_to_current_file):
                self.mark_moved()
                return edit
        state.steps_back = start
        logger.debug("Reached the end of edit history, aborting action")
        return None

    def next(self, current: Location | None, restrict_to_current_file: bool = False) -> Edit | None:
        """Step toward newer entries, never past the newest (``steps_back == 1``)."""
        state = self.store.navigation
        start = state.steps_back
        while state.steps_back > 1:
            state.steps_back -= 1
            edit = self.store.entry_at_steps_back(state.steps_back)
            if self._qualifies(edit, current, restrict_to_current_file):
                self.mark_moved()
                return edit
        state.steps_back = start
        logger.debug("Already at the most recent edit, aborting action")
        return None

    def cancel(self) -> Edit | None:
        """Leave navigation and return the newest entry to move back to."""
        state = self.store.navigation
        if state.steps_back <= 0:
            return None
        state.steps_back = 0
        newest = self.store.last()
        if newest is not None:
            self.mark_moved()
        return newest

    def reset(self) -> None:
        self.store.navigation.steps_back = 0

    def selection_changed(self, timestamp_ms: float, promote: bool = False) -> bool:
        """Handle a host selection change; return whether navigation was reset.

        Changes inside the ignore window after our own move are ignored. With
        ``promote`` the entry the cursor was on becomes the newest entry.
        """
        state = self.store.navigation
        if state.steps_back <= 0:
            return False
        elapsed = timestamp_ms - state.last_navigation_ms
        if elapsed <= self.ignore_window_ms:
            return False
        logger.debug("Resetting step back history. Time since move to edit command: %.0f", elapsed)
        if promote:
            entry = self.current_entry()
            if entry is not None:
                self.store.promote(entry)
                logger.debug("Promoted line %d in %s to the top", entry.line, entry.file_path)
        state.steps_back = 0
        return True

    def _qualifies(self, edit: Edit | None, current: Location | None, restrict: bool) -> bool:
        if edit is None or _is_at(edit, current):
            return False
        if restrict and (current is None or not same_path(edit.file_path, current.file_path)):
            return False
        return True

    def mark_moved(self) -> None:
        self.store.navigation.last_navigation_ms = self._clock()
