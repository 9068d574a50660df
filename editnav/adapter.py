"""Normalization of raw document-change notifications into edit candidates.

Host payloads are validated here; everything past this module works on
``EditCandidate`` records only.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from .model import EditCandidate
from .paths import is_ignored, is_untitled

logger = logging.getLogger(__name__)


def _coordinate(payload: Mapping[str, object], *names: str) -> int:
    for name in names:
        if name in payload:
            value = payload[name]
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")
            return value
    raise ValueError(f"missing {names[0]}")


@dataclass(frozen=True)
class RawChange:
    """One replaced range and the text that replaced it."""

    start_line: int
    start_char: int
    end_line: int
    end_char: int
    inserted_text: str = ""

    def __post_init__(self) -> None:
        if (self.end_line, self.end_char) < (self.start_line, self.start_char):
            raise ValueError(
                f"change range ends before it starts: "
                f"{self.start_line}:{self.start_char}-{self.end_line}:{self.end_char}"
            )

    @classmethod
    def from_payload(cls, payload: object) -> RawChange:
        """Parse a sub-change given flat or with a nested ``changeRange`` object."""
        if not isinstance(payload, Mapping):
            raise ValueError("sub-change must be an object")
        span = payload.get("changeRange", payload)
        if not isinstance(span, Mapping):
            raise ValueError("changeRange must be an object")
        text = payload.get("insertedText", payload.get("text", ""))
        if not isinstance(text, str):
            raise ValueError("insertedText must be a string")
        return cls(
            start_line=_coordinate(span, "startLine", "start_line"),
            start_char=_coordinate(span, "startChar", "start_char"),
            end_line=_coordinate(span, "endLine", "end_line"),
            end_char=_coordinate(span, "endChar", "end_char"),
            inserted_text=text,
        )


@dataclass(frozen=True)
class DocumentChanged:
    """A host notification that may batch several sub-changes of one file."""

    file_path: str
    changes: tuple[RawChange, ...]
    is_active_file: bool = True

    @classmethod
    def from_payload(cls, payload: object) -> DocumentChanged:
        if not isinstance(payload, Mapping):
            raise ValueError("document change must be an object")
        file_path = payload.get("filePath")
        if not isinstance(file_path, str):
            raise ValueError("filePath must be a string")
        raw_changes = payload.get("subChanges", payload.get("changes", []))
        if not isinstance(raw_changes, list):
            raise ValueError("subChanges must be a list")
        is_active = payload.get("isActiveFile", True)
        if not isinstance(is_active, bool):
            raise ValueError("isActiveFile must be a boolean")
        return cls(
            file_path=file_path,
            changes=tuple(RawChange.from_payload(item) for item in raw_changes),
            is_active_file=is_active,
        )


def rejection_reason(event: DocumentChanged) -> str | None:
    """Return why a notification yields no candidates, or ``None`` to accept it."""
    if not event.is_active_file:
        return "not the active file"
    if is_untitled(event.file_path):
        return "untitled file"
    if is_ignored(event.file_path):
        return "ignored file"
    if not event.changes:
        return "no content changes"
    return None


def _line_segment(text: str, index: int) -> str:
    return text.split("\n")[index].rstrip("\r")


def adapt_change(file_path: str, change: RawChange) -> EditCandidate:
    """Normalize one sub-change.

    Deletions anchor at the start column. Insertions anchor where the
    inserted text ends on the line the edit is recorded on: the start line,
    or the line opened by a leading line break.
    """
    text = change.inserted_text
    lines_added = text.count("\n")
    lines_removed = change.end_line - change.start_line
    replaced_span = change.end_char - change.start_char if lines_removed == 0 else 0
    is_deletion = lines_removed > 0 or replaced_span > len(text)

    if is_deletion:
        character = change.start_char
    elif lines_added and text.startswith(("\n", "\r\n")):
        character = len(_line_segment(text, 1))
    else:
        character = change.start_char + len(_line_segment(text, 0))

    return EditCandidate(
        file_path=file_path,
        line=change.start_line,
        character=character,
        inserted_text=text,
        lines_added=lines_added,
        lines_removed=lines_removed,
        is_deletion=is_deletion,
    )


def iter_candidates(event: DocumentChanged) -> Iterator[EditCandidate]:
    """Yield one candidate per sub-change, in notification order.

    Candidates are produced lazily so each can be merged before the next one
    is built.
    """
    reason = rejection_reason(event)
    if reason is not None:
        logger.debug("Ignoring change in %s: %s", event.file_path, reason)
        return
    for change in event.changes:
        yield adapt_change(event.file_path, change)
