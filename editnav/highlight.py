"""Terminal rendering of picker rows with Pygments line highlighting.

Line snapshots come from arbitrary files, so control bytes are escaped before
anything reaches the terminal.
"""

from __future__ import annotations

import re
from pathlib import Path

from pygments import highlight as pygments_highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .picker import PickerItem

DEFAULT_STYLE = "monokai"
DIM = "\033[2m"
RESET = "\033[0m"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_FORMATTERS: dict[str, TerminalFormatter] = {}


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source
    return _CONTROL_RE.sub(lambda match: f"\\x{ord(match.group()):02x}", source)


def _normalize_style(style: str) -> str:
    try:
        get_style_by_name(style)
    except ClassNotFound:
        return DEFAULT_STYLE
    return style


def _formatter_for_style(style: str) -> TerminalFormatter:
    style = _normalize_style(style)
    formatter = _FORMATTERS.get(style)
    if formatter is None:
        formatter = TerminalFormatter(style=style)
        _FORMATTERS[style] = formatter
    return formatter


def highlight_line(text: str, file_path: str, style: str = DEFAULT_STYLE) -> str:
    """Highlight one line of source using the lexer guessed from ``file_path``."""
    try:
        lexer = get_lexer_for_filename(Path(file_path).name, stripnl=False)
    except ClassNotFound:
        lexer = TextLexer(stripnl=False)
    rendered = pygments_highlight(text, lexer, _formatter_for_style(style))
    return rendered.rstrip("\n")


def render_picker_row(item: PickerItem, *, style: str = DEFAULT_STYLE, no_color: bool = False) -> str:
    """Render ``text (line) detail`` with the text highlighted and the rest dimmed."""
    text = sanitize_terminal_text(item.display_text)
    detail = sanitize_terminal_text(item.detail)
    if no_color:
        return " ".join(part for part in (text, item.location_label, detail) if part)
    parts: list[str] = []
    if text:
        parts.append(highlight_line(text, item.edit.file_path, style))
    parts.append(f"{DIM}{item.location_label}{RESET}")
    if detail:
        parts.append(f"{DIM}{detail}{RESET}")
    return " ".join(parts)
