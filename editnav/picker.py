"""Picker rows for the edit history, newest first.

Rows can be narrowed to one file and filtered by a typed query. The query is
matched against the edited line and the file name separately; substring hits
beat subsequence hits, and line hits beat name hits.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .model import Edit
from .paths import same_path
from .store import EditStore

PICKER_RESULT_LIMIT = 200


@dataclass(frozen=True)
class PickerItem:
    """One picker row bound to the edit it jumps to."""

    display_text: str
    location_label: str
    detail: str
    edit: Edit

    @property
    def label(self) -> str:
        parts = [self.display_text, self.location_label]
        if self.detail:
            parts.append(self.detail)
        return " ".join(part for part in parts if part)


def subsequence_score(query: str, text: str) -> int | None:
    """Score ``query`` as an in-order subsequence of ``text``.

    Adjacent hits build a streak bonus, hits at the start of a word earn a
    bonus, and skipped characters cost a little. ``None`` means no match.
    """
    if not query:
        return 0
    folded = text.casefold()
    score = 0
    pos = -1
    streak = 0
    for char in query.casefold():
        found = folded.find(char, pos + 1)
        if found < 0:
            return None
        if found == pos + 1:
            streak += 1
            score += 8 * streak
        else:
            streak = 0
            score -= min(30, found - pos - 1)
        if found == 0 or not folded[found - 1].isalnum():
            score += 25
        score += 10
        pos = found
    return score - len(folded) // 8


# A hit in the file name ranks below the same hit in the edited line.
_NAME_PENALTY = 500
_SUBSTRING_BASE = 10_000


def _field_score(query: str, text: str) -> int | None:
    if not text:
        return None
    index = text.casefold().find(query.casefold())
    if index >= 0:
        return _SUBSTRING_BASE - index * 50 - len(text)
    return subsequence_score(query, text)


def match_score(query: str, item: PickerItem) -> int | None:
    """Best score of ``query`` against the row's line text or file name."""
    scores = [_field_score(query, item.display_text)]
    name_score = _field_score(query, item.edit.display_name)
    if name_score is not None:
        scores.append(name_score - _NAME_PENALTY)
    matched = [score for score in scores if score is not None]
    return max(matched) if matched else None


def filter_items(query: str, items: list[PickerItem], limit: int = PICKER_RESULT_LIMIT) -> list[PickerItem]:
    """Return items matching ``query``, best first, stable for equal scores."""
    if not query.strip():
        return items[: max(1, limit)]

    scored: list[tuple[int, int, PickerItem]] = []
    for idx, item in enumerate(items):
        score = match_score(query.strip(), item)
        if score is not None:
            scored.append((score, idx, item))
    scored.sort(key=lambda hit: (-hit[0], hit[1]))
    return [item for _, _, item in scored[: max(1, limit)]]


def build_picker_items(
    edits: Iterable[Edit],
    active_file: str | None,
    path_filter: str | None = None,
    query: str = "",
) -> list[PickerItem]:
    """Build newest-first picker rows.

    ``detail`` carries the display name only for edits outside
    ``active_file``. ``path_filter`` keeps edits of that one file.
    """
    items: list[PickerItem] = []
    for edit in reversed(list(edits)):
        if path_filter is not None and not same_path(edit.file_path, path_filter):
            continue
        in_active = active_file is not None and same_path(edit.file_path, active_file)
        items.append(
            PickerItem(
                display_text=edit.line_text,
                location_label=f"({edit.line + 1})",
                detail="" if in_active else edit.display_name,
                edit=edit,
            )
        )
    return filter_items(query, items) if query else items


def promote_to_top(store: EditStore, edit: Edit) -> bool:
    """Make ``edit`` the newest history entry; ``False`` if it is not stored."""
    return store.promote(edit)
