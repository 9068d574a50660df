"""Decide whether an incoming change records, replaces, or skips an edit."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from .model import Edit, EditCandidate
from .paths import display_name, same_path
from .store import EditStore

logger = logging.getLogger(__name__)


class HistoryMerger:
    """Fold edit candidates into an ``EditStore``.

    Rules, checked against the newest entry:
    - a non-newline change on the newest entry's line refines that entry and
      records nothing;
    - a change within ``group_within_lines`` of the newest entry in the same
      file replaces it;
    - anything else is appended as a new entry.
    """

    def __init__(
        self,
        store: EditStore,
        *,
        group_within_lines: int = 1,
        line_text: Callable[[str, int], str] | None = None,
        workspace_roots: list[Path] | None = None,
    ) -> None:
        self.store = store
        self.group_within_lines = max(0, group_within_lines)
        self._line_text = line_text
        self.workspace_roots = list(workspace_roots or [])

    def merge(self, candidate: EditCandidate) -> Edit | None:
        """Apply one candidate; return the new edit or ``None`` when skipped."""
        store = self.store
        last = store.last()
        same_file = last is not None and same_path(last.file_path, candidate.file_path)

        if same_file and last.line == candidate.line and not candidate.starts_with_newline:
            # Keep positions right even though nothing new is recorded.
            store.reconcile(
                candidate.file_path,
                candidate.line,
                candidate.lines_added,
                candidate.lines_removed,
                exclude=last,
            )
            # Entries below a deleted block can slide onto the kept line.
            store.prune(last.line, last.file_path, keep=last)
            logger.debug("Change on line %d continues the last edit", candidate.line)
            return None

        if same_file:
            distance = abs(last.line - candidate.line)
            if distance <= self.group_within_lines:
                logger.debug(
                    "Change was %d lines away from last edit, so removing last edit.", distance
                )
                store.remove(last)

        edit = self._build_edit(candidate)
        store.reconcile(edit.file_path, edit.line, candidate.lines_added, candidate.lines_removed)
        store.prune(edit.line, edit.file_path)
        store.append(edit)
        logger.debug("Saving new edit at line %d in %s", edit.line, edit.file_path)
        return edit

    def record_location(self, file_path: str, line: int, character: int = 0) -> Edit:
        """Record an explicit location as the newest entry, bypassing grouping."""
        edit = self.build_edit(file_path, line, character)
        self.store.prune(line, file_path)
        self.store.append(edit)
        logger.debug("Saving new edit at line %d in %s", line, file_path)
        return edit

    def build_edit(self, file_path: str, line: int, character: int) -> Edit:
        text = ""
        if self._line_text is not None:
            text = (self._line_text(file_path, line) or "").strip()
        return Edit(
            file_path=file_path,
            line=line,
            character=character,
            line_text=text,
            display_name=display_name(file_path, self.workspace_roots),
        )

    def _build_edit(self, candidate: EditCandidate) -> Edit:
        line = candidate.line + (1 if candidate.starts_with_newline else 0)
        return self.build_edit(candidate.file_path, line, candidate.character)
