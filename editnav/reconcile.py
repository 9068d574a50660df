"""Line-number reconciliation for stored edits after a change in their file."""

from __future__ import annotations

import logging

from .model import Edit
from .paths import path_key

logger = logging.getLogger(__name__)


def reconcile_positions(
    edits: list[Edit],
    file_path: str,
    changed_line: int,
    lines_added: int,
    lines_removed: int,
    exclude: Edit | None = None,
) -> list[Edit]:
    """Shift or drop same-file edits around a change at ``changed_line``.

    Mutates ``edits`` in place and returns the edits that were dropped because
    their line was deleted. Removal is applied before addition, and both use
    the original ``changed_line``:

    1. drop edits with ``changed_line <= line < changed_line + lines_removed``;
    2. subtract ``lines_removed`` from edits at or below the deleted block;
    3. add ``lines_added`` to edits at or below ``changed_line``.

    ``exclude`` (compared by identity) is left untouched.
    """
    if lines_added <= 0 and lines_removed <= 0:
        return []

    key = path_key(file_path)
    dropped: list[Edit] = []
    kept: list[Edit] = []
    for edit in edits:
        if edit is exclude or path_key(edit.file_path) != key:
            kept.append(edit)
            continue
        if lines_removed > 0:
            if changed_line <= edit.line < changed_line + lines_removed:
                dropped.append(edit)
                continue
            if edit.line >= changed_line + lines_removed:
                edit.line -= lines_removed
        if lines_added > 0 and edit.line >= changed_line:
            edit.line += lines_added
        kept.append(edit)

    if dropped:
        logger.debug(
            "Dropped %d edit(s) inside deleted lines %d-%d of %s",
            len(dropped),
            changed_line,
            changed_line + lines_removed - 1,
            file_path,
        )
    edits[:] = kept
    return dropped
