"""Edit-history data model: recorded edits, change candidates, and commands.

This module intentionally has no editor concerns.
It provides the record types passed between adapter, merger, store and cursor.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RevealMode(str, Enum):
    """How the host should scroll a moved-to location into view."""

    DEFAULT = "default"
    CENTER_IF_OUTSIDE = "centerIfOutside"
    CENTER = "center"


@dataclass
class Edit:
    """One recorded edit location.

    ``line`` is rewritten in place as later changes shift the file; every
    other field is a snapshot taken when the edit was recorded.
    """

    file_path: str
    line: int
    character: int = 0
    line_text: str = ""
    display_name: str = ""

    def __post_init__(self) -> None:
        if not self.display_name:
            self.display_name = self.file_path

    def to_record(self) -> dict[str, object]:
        """Return the JSON-serializable persisted form."""
        return {
            "filePath": self.file_path,
            "line": self.line,
            "character": self.character,
            "lineText": self.line_text,
            "displayName": self.display_name,
        }

    @classmethod
    def from_record(cls, record: object) -> Edit:
        """Build an edit from a persisted record, raising ``ValueError`` on bad shape."""
        if not isinstance(record, dict):
            raise ValueError(f"edit record must be an object, got {type(record).__name__}")
        file_path = record.get("filePath")
        if not isinstance(file_path, str) or not file_path:
            raise ValueError("edit record has no filePath")
        line = record.get("line")
        character = record.get("character", 0)
        for name, value in (("line", line), ("character", character)):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"edit record has invalid {name}: {value!r}")
        line_text = record.get("lineText", "")
        display_name = record.get("displayName", "")
        return cls(
            file_path=file_path,
            line=line,
            character=character,
            line_text=line_text if isinstance(line_text, str) else "",
            display_name=display_name if isinstance(display_name, str) else "",
        )


@dataclass(frozen=True)
class EditCandidate:
    """Normalized single change, ready for the history merger."""

    file_path: str
    line: int
    character: int
    inserted_text: str
    lines_added: int
    lines_removed: int
    is_deletion: bool

    @property
    def starts_with_newline(self) -> bool:
        """Whether the change opens a new line at its position."""
        return self.inserted_text.startswith("\n") or self.inserted_text.startswith("\r\n")


@dataclass(frozen=True)
class Location:
    """Host cursor position in one file."""

    file_path: str
    line: int
    character: int = 0


@dataclass(frozen=True)
class MoveCursor:
    """Command asking the host to place the cursor at an edit."""

    file_path: str
    line: int
    character: int
    reveal_mode: RevealMode = RevealMode.DEFAULT

    @classmethod
    def to_edit(cls, edit: Edit, reveal_mode: RevealMode) -> MoveCursor:
        return cls(edit.file_path, edit.line, edit.character, reveal_mode)
