"""Tests for event-log replay and the command-line entry point."""

from __future__ import annotations

import io
import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from editnav import cli
from editnav.config import EngineConfig
from editnav.engine import EditHistoryEngine
from editnav.model import MoveCursor, RevealMode


def _change(file_path: str, line: int, text: str = "x") -> dict[str, object]:
    return {
        "type": "documentChanged",
        "filePath": file_path,
        "subChanges": [{"startLine": line, "startChar": 0, "endLine": line, "endChar": 0, "insertedText": text}],
    }


def _engine(moves: list[MoveCursor], missing: set[str] | None = None) -> EditHistoryEngine:
    blocked = missing or set()
    return EditHistoryEngine(
        EngineConfig(group_edits_within_lines=0),
        move_cursor=moves.append,
        file_exists=lambda path: path not in blocked,
        line_text=lambda path, line: "",
    )


class ReplayTests(unittest.TestCase):
    def test_replay_drives_engine(self) -> None:
        moves: list[MoveCursor] = []
        engine = _engine(moves)
        lines = [
            json.dumps(_change("/w/a.py", 1)),
            "",
            json.dumps(_change("/w/b.py", 7)),
            json.dumps({"type": "selectionChanged", "filePath": "/w/b.py", "line": 7}),
            json.dumps({"type": "command", "name": "previous"}),
        ]
        applied = cli.replay_events(engine, lines, io.StringIO())
        self.assertEqual(applied, 4)
        self.assertEqual(moves, [MoveCursor("/w/a.py", 1, 1, RevealMode.CENTER_IF_OUTSIDE)])

    def test_config_and_delete_events(self) -> None:
        moves: list[MoveCursor] = []
        engine = _engine(moves)
        lines = [
            json.dumps({"type": "configChanged", "settings": {"maxHistorySize": 1}}),
            json.dumps(_change("/w/a.py", 1)),
            json.dumps(_change("/w/b.py", 2)),
            json.dumps({"type": "fileDeleted", "filePath": "/w/b.py"}),
        ]
        cli.replay_events(engine, lines, io.StringIO())
        self.assertEqual(engine.history, [])

    def test_missing_target_is_reported_and_skipped(self) -> None:
        moves: list[MoveCursor] = []
        engine = _engine(moves, missing={"/w/a.py"})
        err = io.StringIO()
        lines = [
            json.dumps(_change("/w/a.py", 1)),
            json.dumps(_change("/w/b.py", 5)),
            json.dumps({"type": "selectionChanged", "filePath": "/w/b.py", "line": 5}),
            json.dumps({"type": "command", "name": "previous"}),
        ]
        self.assertEqual(cli.replay_events(engine, lines, err), 4)
        self.assertIn("line 4: File not found: /w/a.py", err.getvalue())
        self.assertEqual(moves, [])

    def test_bad_lines_exit_with_line_number(self) -> None:
        engine = _engine([])
        cases = [
            "{not json",
            "[1]",
            json.dumps({"type": "teleport"}),
            json.dumps({"type": "command", "name": "jump"}),
            json.dumps({"type": "selectionChanged", "filePath": "/a.py", "line": "7"}),
        ]
        for raw in cases:
            with self.subTest(raw=raw):
                with self.assertRaises(SystemExit) as ctx:
                    cli.replay_events(engine, ["", raw], io.StringIO())
                self.assertIn("line 2", str(ctx.exception))

    def test_format_move(self) -> None:
        text = cli.format_move(MoveCursor("/w/a.py", 0, 4, RevealMode.CENTER))
        self.assertEqual(text, "move /w/a.py:1:5 (center)")


class MainTests(unittest.TestCase):
    def test_replay_persists_then_list_prints_history(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            source = root / "app.py"
            source.write_text("import os\nvalue = 1\n", encoding="utf-8")
            events = root / "events.jsonl"
            events.write_text(json.dumps(_change(str(source), 1)) + "\n", encoding="utf-8")
            state = root / "history.json"
            config_path = root / "config.json"

            with mock.patch("editnav.config.CONFIG_PATH", config_path), mock.patch(
                "sys.stdout", new_callable=io.StringIO
            ):
                cli.main([str(events), "--state", str(state), "--workspace", str(root)])

            saved = json.loads(state.read_text(encoding="utf-8"))
            self.assertEqual([(record["line"], record["displayName"]) for record in saved], [(1, "app.py")])

            with mock.patch("editnav.config.CONFIG_PATH", config_path), mock.patch(
                "sys.stdout", new_callable=io.StringIO
            ) as out:
                cli.main(["--list", "--no-color", "--state", str(state)])
            self.assertEqual(out.getvalue(), "  1 value = 1 (2) app.py\n")

    def test_requires_events_or_list(self) -> None:
        with mock.patch("sys.stderr", new_callable=io.StringIO):
            with self.assertRaises(SystemExit):
                cli.main([])

    def test_missing_event_file_exits(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(SystemExit) as ctx:
                cli.main([str(Path(tmp) / "none.jsonl"), "--no-persist", "--state", str(Path(tmp) / "h.json")])
            self.assertIn("Path not found", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
