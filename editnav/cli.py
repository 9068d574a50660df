"""Command-line front door for editnav.

Replays a JSON-lines log of host events through an engine, printing every
command the engine emits, or lists the stored edit history.
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from . import persistence
from .config import EngineConfig, load_engine_config
from .engine import EditHistoryEngine, TargetNotFound
from .highlight import DEFAULT_STYLE, render_picker_row
from .model import MoveCursor
from .picker import PickerItem

_COMMANDS = {
    "previous": lambda engine: engine.previous(),
    "next": lambda engine: engine.next(),
    "previousInFile": lambda engine: engine.previous_in_file(),
    "nextInFile": lambda engine: engine.next_in_file(),
    "cancel": lambda engine: engine.cancel(),
    "create": lambda engine: engine.create_at(),
    "remove": lambda engine: engine.remove_at(),
    "toggle": lambda engine: engine.toggle_at(),
    "clear": lambda engine: engine.clear(),
    "picker": lambda engine: engine.show_picker(),
}


def _non_negative_int(value: str) -> int:
    """argparse type for non-negative integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def format_move(command: MoveCursor) -> str:
    return f"move {command.file_path}:{command.line + 1}:{command.character + 1} ({command.reveal_mode.value})"


def apply_event(engine: EditHistoryEngine, event: dict[str, object]) -> None:
    """Dispatch one decoded event record to the engine.

    Raises ``ValueError`` for unknown event types or malformed payloads.
    """
    kind = event.get("type")
    if kind == "documentChanged":
        engine.on_document_changed(event)
    elif kind == "fileDeleted":
        file_path = event.get("filePath")
        if not isinstance(file_path, str):
            raise ValueError("fileDeleted needs a filePath")
        engine.on_file_deleted(file_path)
    elif kind == "selectionChanged":
        file_path = event.get("filePath")
        line = event.get("line")
        timestamp = event.get("timestampMs")
        character = event.get("character", 0)
        if not isinstance(file_path, str) or isinstance(line, bool) or not isinstance(line, int):
            raise ValueError("selectionChanged needs filePath and line")
        if timestamp is not None and (isinstance(timestamp, bool) or not isinstance(timestamp, (int, float))):
            raise ValueError("timestampMs must be a number")
        if isinstance(character, bool) or not isinstance(character, int):
            raise ValueError("character must be an integer")
        engine.on_selection_changed(file_path, line, timestamp, character)
    elif kind == "configChanged":
        settings = event.get("settings", event)
        if not isinstance(settings, dict):
            raise ValueError("configChanged settings must be an object")
        engine.on_config_changed(settings)
    elif kind == "command":
        name = event.get("name")
        action = _COMMANDS.get(name) if isinstance(name, str) else None
        if action is None:
            raise ValueError(f"unknown command: {name!r}")
        action(engine)
    else:
        raise ValueError(f"unknown event type: {kind!r}")


def replay_events(engine: EditHistoryEngine, lines: Iterable[str], err: TextIO) -> int:
    """Apply every non-blank JSON line; return the number of events applied.

    Missing navigation targets are reported and skipped so a replay can run
    past files deleted since the log was written.
    """
    applied = 0
    for lineno, raw in enumerate(lines, start=1):
        if not raw.strip():
            continue
        try:
            event = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise SystemExit(f"line {lineno}: invalid JSON: {exc}") from exc
        if not isinstance(event, dict):
            raise SystemExit(f"line {lineno}: event must be a JSON object")
        try:
            apply_event(engine, event)
        except TargetNotFound as exc:
            err.write(f"line {lineno}: {exc}\n")
        except ValueError as exc:
            raise SystemExit(f"line {lineno}: {exc}") from exc
        applied += 1
    return applied


def print_picker(items: list[PickerItem], out: TextIO, style: str, no_color: bool) -> None:
    for idx, item in enumerate(items, start=1):
        out.write(f"{idx:>3} {render_picker_row(item, style=style, no_color=no_color)}\n")


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and replay events or list the stored history."""
    parser = argparse.ArgumentParser(description="Navigate the history of edit locations.")
    parser.add_argument("events", nargs="?", default=None, help="JSON-lines event log to replay ('-' for stdin).")
    parser.add_argument("--list", action="store_true", help="Print the stored edit history, newest first.")
    parser.add_argument("--query", default="", help="Filter --list output with a fuzzy query.")
    parser.add_argument("--state", type=Path, default=None, help="History file (default: user state dir).")
    parser.add_argument("--no-persist", action="store_true", help="Do not write the history back after replay.")
    parser.add_argument(
        "--workspace",
        action="append",
        type=Path,
        default=None,
        help="Workspace root for display names (repeatable).",
    )
    parser.add_argument("--max-history", type=_non_negative_int, default=None, help="Override maxHistorySize.")
    parser.add_argument("--group-within", type=_non_negative_int, default=None, help="Override groupEditsWithinLines.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument("--style", default=DEFAULT_STYLE, help="Pygments style name for --list output.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    args = parser.parse_args(argv)

    if args.events is None and not args.list:
        parser.error("nothing to do: give an event log or --list")

    overrides: dict[str, object] = {}
    if args.max_history is not None:
        overrides["maxHistorySize"] = args.max_history
    if args.group_within is not None:
        overrides["groupEditsWithinLines"] = args.group_within
    if args.debug:
        overrides["logDebug"] = True
    config = EngineConfig.from_mapping(overrides, base=load_engine_config())

    out = sys.stdout
    persist = None if args.no_persist else (lambda snapshot: persistence.save_history(snapshot, args.state))
    engine = EditHistoryEngine(
        config,
        move_cursor=lambda command: out.write(format_move(command) + "\n"),
        persist_state=persist,
        show_picker=lambda items: print_picker(items, out, args.style, args.no_color),
        workspace_roots=[root.resolve() for root in args.workspace or [Path.cwd()]],
    )
    engine.load_state(persistence.load_history(args.state))

    if args.events is not None:
        if args.events == "-":
            replay_events(engine, sys.stdin, sys.stderr)
        else:
            events_path = Path(args.events)
            if not events_path.is_file():
                raise SystemExit(f"Path not found: {events_path}")
            with events_path.open(encoding="utf-8") as handle:
                replay_events(engine, handle, sys.stderr)

    if args.list:
        print_picker(engine.picker_items(args.query), out, args.style, args.no_color)


if __name__ == "__main__":
    main()
