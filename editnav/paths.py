"""Path comparison and labeling helpers for recorded edits.

Paths are compared through an explicit normalized key rather than pattern
matching, so separators, case, and regex metacharacters never matter.
"""

from __future__ import annotations

import os
import re
from pathlib import Path, PurePath

IGNORED_FILE_SUFFIXES: tuple[str, ...] = ("settings.json", "keybindings.json", ".git")

_UNTITLED_RE = re.compile(r"^[\w\-. ]+$")


def path_key(file_path: str) -> str:
    """Return the comparison key for ``file_path``: separator-normalized, case-folded."""
    normalized = file_path.replace("\\", "/")
    while "//" in normalized:
        normalized = normalized.replace("//", "/")
    if len(normalized) > 1:
        normalized = normalized.rstrip("/")
    return normalized.casefold()


def same_path(left: str, right: str) -> bool:
    return path_key(left) == path_key(right)


def is_within(file_path: str, directory: str) -> bool:
    """Return whether ``file_path`` lies strictly below ``directory``."""
    file_key = path_key(file_path)
    dir_key = path_key(directory)
    if dir_key == "/":
        return file_key.startswith("/") and file_key != "/"
    return file_key.startswith(dir_key + "/")


def is_untitled(file_path: str) -> bool:
    """Return whether ``file_path`` is an identifier-only name of an unsaved buffer."""
    if not file_path:
        return True
    if "/" in file_path or "\\" in file_path:
        return False
    return _UNTITLED_RE.match(file_path) is not None


def is_ignored(file_path: str) -> bool:
    """Return whether edits in ``file_path`` should never be recorded."""
    return any(file_path.endswith(suffix) for suffix in IGNORED_FILE_SUFFIXES)


def display_name(file_path: str, workspace_roots: list[Path]) -> str:
    """Return ``file_path`` relative to its owning workspace root, if any.

    The deepest matching root wins so nested workspaces get the shortest
    label. Paths outside every root are returned unchanged.
    """
    best: PurePath | None = None
    target = PurePath(file_path)
    for root in workspace_roots:
        try:
            relative = target.relative_to(root)
        except ValueError:
            continue
        if not relative.parts:
            continue
        if best is None or len(relative.parts) < len(best.parts):
            best = relative
    if best is None:
        return file_path
    return best.as_posix()


def file_exists(file_path: str) -> bool:
    return os.path.isfile(file_path)


_TEXT_ENCODINGS = ("utf-8-sig", "latin-1")


def read_line_text(file_path: str, line: int) -> str:
    """Return one line of a file on disk, or ``""`` when it cannot be read.

    The file is streamed only up to ``line``. Undecodable UTF-8 is retried
    as latin-1, which accepts any byte.
    """
    if line < 0:
        return ""
    for encoding in _TEXT_ENCODINGS:
        try:
            with open(file_path, encoding=encoding, newline="") as handle:
                for number, text in enumerate(handle):
                    if number == line:
                        return text.rstrip("\r\n")
        except UnicodeDecodeError:
            continue
        except OSError:
            return ""
        return ""
    return ""
