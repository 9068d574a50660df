"""Tests for raw change parsing, normalization, and rejection rules."""

from __future__ import annotations

import unittest

from editnav.adapter import DocumentChanged, RawChange, adapt_change, iter_candidates, rejection_reason


class RawChangeParsingTests(unittest.TestCase):
    def test_flat_payload(self) -> None:
        change = RawChange.from_payload(
            {"startLine": 1, "startChar": 2, "endLine": 1, "endChar": 4, "insertedText": "ab"}
        )
        self.assertEqual(change, RawChange(1, 2, 1, 4, "ab"))

    def test_nested_change_range_payload(self) -> None:
        change = RawChange.from_payload(
            {"changeRange": {"startLine": 3, "startChar": 0, "endLine": 5, "endChar": 1}, "text": ""}
        )
        self.assertEqual(change, RawChange(3, 0, 5, 1, ""))

    def test_malformed_payloads_raise(self) -> None:
        bad_payloads = [
            [],
            {"startLine": 1, "startChar": 0, "endLine": 1},
            {"startLine": "1", "startChar": 0, "endLine": 1, "endChar": 0},
            {"startLine": -1, "startChar": 0, "endLine": 1, "endChar": 0},
            {"startLine": True, "startChar": 0, "endLine": 1, "endChar": 0},
            {"startLine": 2, "startChar": 0, "endLine": 1, "endChar": 0},
            {"startLine": 1, "startChar": 0, "endLine": 1, "endChar": 0, "insertedText": 3},
            {"changeRange": "1:0-1:0"},
        ]
        for payload in bad_payloads:
            with self.subTest(payload=payload):
                with self.assertRaises(ValueError):
                    RawChange.from_payload(payload)

    def test_document_payload(self) -> None:
        event = DocumentChanged.from_payload(
            {
                "filePath": "/a.py",
                "isActiveFile": False,
                "subChanges": [{"startLine": 0, "startChar": 0, "endLine": 0, "endChar": 0, "insertedText": "x"}],
            }
        )
        self.assertEqual(event.file_path, "/a.py")
        self.assertFalse(event.is_active_file)
        self.assertEqual(len(event.changes), 1)

    def test_document_payload_requires_list_of_changes(self) -> None:
        with self.assertRaises(ValueError):
            DocumentChanged.from_payload({"filePath": "/a.py", "subChanges": {"startLine": 0}})
        with self.assertRaises(ValueError):
            DocumentChanged.from_payload({"filePath": 7, "subChanges": []})


class AdaptChangeTests(unittest.TestCase):
    def test_typing_anchors_after_inserted_text(self) -> None:
        candidate = adapt_change("/a.py", RawChange(4, 10, 4, 10, "abc"))
        self.assertEqual((candidate.line, candidate.character), (4, 13))
        self.assertEqual((candidate.lines_added, candidate.lines_removed), (0, 0))
        self.assertFalse(candidate.is_deletion)

    def test_newline_insert_anchors_on_opened_line(self) -> None:
        candidate = adapt_change("/a.py", RawChange(4, 10, 4, 10, "\n    pass"))
        self.assertEqual(candidate.lines_added, 1)
        self.assertEqual(candidate.character, 8)
        self.assertTrue(candidate.starts_with_newline)

    def test_blank_lines_anchor_at_start_of_opened_line(self) -> None:
        candidate = adapt_change("/a.py", RawChange(1, 4, 1, 4, "\r\n\r\nfoo"))
        self.assertEqual((candidate.lines_added, candidate.character), (2, 0))

    def test_multiline_paste_column_stays_on_start_line(self) -> None:
        candidate = adapt_change("/a.py", RawChange(5, 2, 5, 2, "a\nb\ncdefg"))
        self.assertEqual((candidate.line, candidate.character), (5, 3))
        self.assertEqual(candidate.lines_added, 2)
        self.assertFalse(candidate.starts_with_newline)

    def test_backspace_is_deletion_anchored_at_start(self) -> None:
        candidate = adapt_change("/a.py", RawChange(2, 5, 2, 8, ""))
        self.assertTrue(candidate.is_deletion)
        self.assertEqual(candidate.character, 5)

    def test_shrinking_replace_is_deletion(self) -> None:
        candidate = adapt_change("/a.py", RawChange(2, 5, 2, 9, "x"))
        self.assertTrue(candidate.is_deletion)

    def test_growing_replace_is_insertion(self) -> None:
        candidate = adapt_change("/a.py", RawChange(2, 5, 2, 6, "xyz"))
        self.assertFalse(candidate.is_deletion)
        self.assertEqual(candidate.character, 8)

    def test_line_join_counts_removed_lines(self) -> None:
        candidate = adapt_change("/a.py", RawChange(8, 3, 11, 0, ""))
        self.assertEqual(candidate.lines_removed, 3)
        self.assertTrue(candidate.is_deletion)
        self.assertEqual((candidate.line, candidate.character), (8, 3))


class RejectionTests(unittest.TestCase):
    def _event(self, file_path: str = "/work/a.py", active: bool = True, changes=None) -> DocumentChanged:
        if changes is None:
            changes = (RawChange(0, 0, 0, 0, "x"),)
        return DocumentChanged(file_path, tuple(changes), active)

    def test_accepts_active_saved_file(self) -> None:
        self.assertIsNone(rejection_reason(self._event()))

    def test_rejection_rules(self) -> None:
        cases = {
            "not the active file": self._event(active=False),
            "untitled file": self._event(file_path="Untitled-1"),
            "ignored file": self._event(file_path="/home/me/.config/Code/User/keybindings.json"),
            "no content changes": self._event(changes=()),
        }
        for reason, event in cases.items():
            with self.subTest(reason=reason):
                self.assertEqual(rejection_reason(event), reason)
                self.assertEqual(list(iter_candidates(event)), [])

    def test_one_candidate_per_sub_change_in_order(self) -> None:
        event = self._event(changes=[RawChange(1, 0, 1, 0, "a"), RawChange(5, 0, 5, 0, "b")])
        self.assertEqual([c.line for c in iter_candidates(event)], [1, 5])


if __name__ == "__main__":
    unittest.main()
