"""Edit-history engine: one instance per host session.

The engine wires adapter, merger, store, cursor and picker together and is
the only place host events enter and host commands leave. Collaborators are
injected as callables so the engine holds no ambient state of its own.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from pathlib import Path

from .adapter import DocumentChanged, iter_candidates
from .config import EngineConfig
from .cursor import NavigationCursor, wall_clock_ms
from .logs import set_debug_logging
from .merger import HistoryMerger
from .model import Edit, Location, MoveCursor, RevealMode
from .paths import file_exists, read_line_text
from .persistence import records_from_snapshot
from .picker import PickerItem, build_picker_items, promote_to_top
from .store import EditStore

logger = logging.getLogger(__name__)


class TargetNotFound(LookupError):
    """Navigation target file no longer exists on disk."""

    def __init__(self, edit: Edit) -> None:
        super().__init__(f"File not found: {edit.file_path}")
        self.edit = edit


class EditHistoryEngine:
    """Track edit locations from host events and navigate through them.

    Args:
        config: Initial settings; defaults when omitted.
        move_cursor: Receives ``MoveCursor`` commands.
        persist_state: Receives the history snapshot after every mutation.
        show_picker: Receives picker rows for ``show_picker``.
        file_exists: Existence check for navigation targets.
        line_text: ``(file_path, line) -> text`` provider for line snapshots.
        workspace_roots: Roots used to shorten display names.
        clock: Wall-clock provider in milliseconds.
        on_history_changed: Optional listener for history mutations.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        move_cursor: Callable[[MoveCursor], None],
        persist_state: Callable[[list[dict[str, object]]], None] | None = None,
        show_picker: Callable[[list[PickerItem]], None] | None = None,
        file_exists: Callable[[str], bool] = file_exists,
        line_text: Callable[[str, int], str] = read_line_text,
        workspace_roots: list[Path] | None = None,
        clock: Callable[[], float] = wall_clock_ms,
        on_history_changed: Callable[[list[Edit]], None] | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self._move_cursor = move_cursor
        self._persist_state = persist_state
        self._show_picker = show_picker
        self._file_exists = file_exists
        self._clock = clock
        self._on_history_changed = on_history_changed

        self.store = EditStore(self.config.max_history_size)
        self.merger = HistoryMerger(
            self.store,
            group_within_lines=self.config.group_edits_within_lines,
            line_text=line_text,
            workspace_roots=workspace_roots,
        )
        self.cursor = NavigationCursor(
            self.store,
            ignore_window_ms=self.config.ignore_window_ms,
            clock=clock,
        )
        self.active_location: Location | None = None
        set_debug_logging(self.config.log_debug)

    @property
    def history(self) -> list[Edit]:
        return list(self.store.edits)

    @property
    def steps_back(self) -> int:
        return self.cursor.steps_back

    # Events

    def load_state(self, snapshot: object) -> bool:
        """Restore a persisted snapshot; a bad snapshot leaves an empty history."""
        try:
            edits = records_from_snapshot(snapshot)
        except ValueError as exc:
            logger.debug("Discarding invalid persisted history: %s", exc)
            self.store.clear()
            return False
        self.store.load(edits)
        return True

    def on_document_changed(self, event: DocumentChanged | Mapping[str, object]) -> list[Edit]:
        """Route every sub-change of a notification through the merge pipeline."""
        if not isinstance(event, DocumentChanged):
            event = DocumentChanged.from_payload(event)
        recorded: list[Edit] = []
        touched = False
        for candidate in iter_candidates(event):
            touched = True
            edit = self.merger.merge(candidate)
            if edit is not None:
                recorded.append(edit)
        if recorded:
            self.cursor.reset()
        if touched:
            self._history_changed()
        return recorded

    def on_file_deleted(self, file_path: str) -> int:
        removed = self.store.remove_file(file_path)
        if removed:
            logger.debug("Removed %d edit(s) for deleted %s", removed, file_path)
            self._history_changed()
        return removed

    def on_selection_changed(
        self,
        file_path: str,
        line: int,
        timestamp_ms: float | None = None,
        character: int = 0,
    ) -> None:
        """Track the host cursor; a manual move ends history navigation."""
        self.active_location = Location(file_path, line, character)
        when = self._clock() if timestamp_ms is None else timestamp_ms
        promote = self.config.promote_on_move
        before = self.history if promote else None
        self.cursor.selection_changed(when, promote=promote)
        if promote and before != self.history:
            self._history_changed()

    def on_config_changed(self, config: EngineConfig | Mapping[str, object]) -> None:
        if not isinstance(config, EngineConfig):
            config = EngineConfig.from_mapping(config, base=self.config)
        self.config = config
        set_debug_logging(config.log_debug)
        self.merger.group_within_lines = config.group_edits_within_lines
        self.cursor.ignore_window_ms = config.ignore_window_ms
        before = len(self.store)
        self.store.set_max_size(config.max_history_size)
        if len(self.store) != before:
            self._history_changed()

    # Navigation commands

    def previous(self, restrict_to_current_file: bool = False) -> Edit | None:
        edit = self.cursor.previous(self.active_location, restrict_to_current_file)
        if edit is not None:
            self._move_to(edit, self._navigation_reveal())
        return edit

    def next(self, restrict_to_current_file: bool = False) -> Edit | None:
        edit = self.cursor.next(self.active_location, restrict_to_current_file)
        if edit is not None:
            self._move_to(edit, self._navigation_reveal())
        return edit

    def previous_in_file(self) -> Edit | None:
        return self.previous(restrict_to_current_file=True)

    def next_in_file(self) -> Edit | None:
        return self.next(restrict_to_current_file=True)

    def cancel(self) -> Edit | None:
        edit = self.cursor.cancel()
        if edit is not None:
            self._move_to(edit, self._navigation_reveal())
        return edit

    # Edit-list commands

    def create_at(self, file_path: str | None = None, line: int | None = None, character: int = 0) -> Edit:
        file_path, line, character = self._resolve_target(file_path, line, character)
        edit = self.merger.record_location(file_path, line, character)
        self.cursor.reset()
        self._history_changed()
        return edit

    def remove_at(self, file_path: str | None = None, line: int | None = None) -> int:
        file_path, line, _ = self._resolve_target(file_path, line, 0)
        removed = self.store.prune(line, file_path)
        if removed:
            self._history_changed()
        return removed

    def toggle_at(self, file_path: str | None = None, line: int | None = None, character: int = 0) -> bool:
        """Create an edit at the location, or remove it if present; return whether one exists now."""
        file_path, line, character = self._resolve_target(file_path, line, character)
        if self.store.contains(line, file_path):
            self.remove_at(file_path, line)
            return False
        self.create_at(file_path, line, character)
        return True

    def clear(self) -> None:
        self.store.clear()
        self._history_changed()

    # Picker

    def picker_items(self, query: str = "") -> list[PickerItem]:
        active_file = self.active_location.file_path if self.active_location else None
        path_filter = active_file if self.config.restrict_picker_to_path else None
        return build_picker_items(self.store.edits, active_file, path_filter=path_filter, query=query)

    def show_picker(self, query: str = "") -> list[PickerItem]:
        items = self.picker_items(query)
        if self._show_picker is not None:
            self._show_picker(items)
        return items

    def pick(self, item: PickerItem | Edit) -> Edit:
        """Jump to a picker selection, promoting it first when configured."""
        edit = item.edit if isinstance(item, PickerItem) else item
        if not self._file_exists(edit.file_path):
            logger.debug("Picked entry in %s no longer exists", edit.file_path)
            raise TargetNotFound(edit)
        if self.config.promote_on_select and promote_to_top(self.store, edit):
            self._history_changed()
        self.cursor.reset()
        reveal = RevealMode.CENTER if self.config.center_on_reveal else RevealMode.DEFAULT
        self._move_to(edit, reveal)
        self.cursor.mark_moved()
        return edit

    # Internals

    def _resolve_target(self, file_path: str | None, line: int | None, character: int) -> tuple[str, int, int]:
        if file_path is None or line is None:
            if self.active_location is None:
                raise ValueError("no location given and no active selection")
            file_path = self.active_location.file_path if file_path is None else file_path
            if line is None:
                line = self.active_location.line
                character = self.active_location.character
        return file_path, line, character

    def _navigation_reveal(self) -> RevealMode:
        return RevealMode.CENTER_IF_OUTSIDE if self.config.center_on_reveal else RevealMode.DEFAULT

    def _move_to(self, edit: Edit, reveal: RevealMode) -> None:
        # Capture the target before handing control to the host.
        command = MoveCursor.to_edit(edit, reveal)
        if not self._file_exists(command.file_path):
            logger.debug("Navigation target %s no longer exists", command.file_path)
            raise TargetNotFound(edit)
        logger.debug("moving selection to line %d in %s", command.line, command.file_path)
        self.active_location = Location(command.file_path, command.line, command.character)
        self._move_cursor(command)

    def _history_changed(self) -> None:
        if self._persist_state is not None:
            try:
                self._persist_state(self.store.snapshot())
            except Exception as exc:
                logger.debug("Could not persist edit history: %s", exc)
        if self._on_history_changed is not None:
            self._on_history_changed(self.history)
