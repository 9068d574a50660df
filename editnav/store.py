"""Bounded, deduplicated edit history.

Entries are kept oldest-first. The store also carries the navigation state so
every removal can keep ``steps_back`` within the history length.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .model import Edit
from .paths import is_within, path_key
from .reconcile import reconcile_positions

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY_SIZE = 100


@dataclass
class NavigationState:
    """How far the navigation cursor has moved away from the newest edit."""

    steps_back: int = 0
    last_navigation_ms: float = 0.0


class EditStore:
    """Ordered edit history with FIFO eviction and ``(file, line)`` dedup."""

    def __init__(self, max_size: int = DEFAULT_MAX_HISTORY_SIZE) -> None:
        self.max_size = max(1, max_size)
        self.edits: list[Edit] = []
        self.navigation = NavigationState()

    def __len__(self) -> int:
        return len(self.edits)

    def __iter__(self):
        return iter(self.edits)

    def last(self) -> Edit | None:
        return self.edits[-1] if self.edits else None

    def set_max_size(self, max_size: int) -> None:
        """Change the bound, evicting the oldest entries if now over it."""
        self.max_size = max(1, max_size)
        self._evict_overflow()

    def append(self, edit: Edit) -> None:
        """Append ``edit`` as the newest entry, evicting the oldest on overflow."""
        self.edits.append(edit)
        self._evict_overflow()

    def _evict_overflow(self) -> None:
        overflow = len(self.edits) - self.max_size
        if overflow > 0:
            logger.debug("Evicting %d oldest edit(s)", overflow)
            del self.edits[:overflow]
            self._clamp_steps_back()

    def remove(self, edit: Edit) -> bool:
        """Remove one entry by identity."""
        for idx, candidate in enumerate(self.edits):
            if candidate is edit:
                del self.edits[idx]
                self._clamp_steps_back()
                return True
        return False

    def prune(self, line: int, file_path: str, keep: Edit | None = None) -> int:
        """Remove every entry at ``line`` in ``file_path``; return how many went.

        ``keep`` is spared by identity so a caller can clear duplicates of one
        entry without losing it.
        """
        key = path_key(file_path)
        before = len(self.edits)
        self.edits = [
            edit
            for edit in self.edits
            if edit is keep or not (edit.line == line and path_key(edit.file_path) == key)
        ]
        removed = before - len(self.edits)
        if removed:
            self._clamp_steps_back()
        return removed

    def contains(self, line: int, file_path: str) -> bool:
        key = path_key(file_path)
        return any(edit.line == line and path_key(edit.file_path) == key for edit in self.edits)

    def remove_file(self, file_path: str) -> int:
        """Remove entries for a deleted file, or for every file below a deleted directory."""
        key = path_key(file_path)
        before = len(self.edits)
        self.edits = [
            edit
            for edit in self.edits
            if path_key(edit.file_path) != key and not is_within(edit.file_path, file_path)
        ]
        removed = before - len(self.edits)
        if removed:
            self._clamp_steps_back()
        return removed

    def promote(self, edit: Edit) -> bool:
        """Move an existing entry to the newest position without changing it."""
        for idx, candidate in enumerate(self.edits):
            if candidate is edit:
                del self.edits[idx]
                self.edits.append(edit)
                return True
        return False

    def reconcile(
        self,
        file_path: str,
        changed_line: int,
        lines_added: int,
        lines_removed: int,
        exclude: Edit | None = None,
    ) -> list[Edit]:
        """Apply a line shift to stored edits; see ``reconcile_positions``."""
        dropped = reconcile_positions(
            self.edits, file_path, changed_line, lines_added, lines_removed, exclude=exclude
        )
        if dropped:
            self._clamp_steps_back()
        return dropped

    def entry_at_steps_back(self, steps_back: int) -> Edit | None:
        """Return the entry ``steps_back`` slots from the newest end (1 = newest)."""
        if not 1 <= steps_back <= len(self.edits):
            return None
        return self.edits[len(self.edits) - steps_back]

    def clear(self) -> None:
        self.edits = []
        self.navigation.steps_back = 0

    def snapshot(self) -> list[dict[str, object]]:
        """Return the persisted form of every entry, oldest first."""
        return [edit.to_record() for edit in self.edits]

    def load(self, edits: list[Edit]) -> None:
        """Replace the history with ``edits``, enforcing bound and dedup."""
        self.clear()
        for edit in edits:
            self.prune(edit.line, edit.file_path)
            self.edits.append(edit)
        self._evict_overflow()

    def _clamp_steps_back(self) -> None:
        if self.navigation.steps_back > len(self.edits):
            self.navigation.steps_back = len(self.edits)
