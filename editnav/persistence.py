"""Persisted edit-history snapshots.

The snapshot is a JSON array of edit records, oldest first. Reading is
defensive: a missing or malformed file yields an empty history, and writing
never raises.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_state_dir

from .model import Edit

logger = logging.getLogger(__name__)

APP_NAME = "editnav"
STATE_FILENAME = "history.json"
STATE_PATH = Path(user_state_dir(APP_NAME, appauthor=False)) / STATE_FILENAME


def records_from_snapshot(snapshot: object) -> list[Edit]:
    """Decode a snapshot into edits, raising ``ValueError`` if any record is bad."""
    if not isinstance(snapshot, list):
        raise ValueError(f"history snapshot must be a list, got {type(snapshot).__name__}")
    return [Edit.from_record(record) for record in snapshot]


def load_history(path: Path | None = None) -> list[dict[str, object]]:
    """Return the raw stored snapshot, or ``[]`` when it cannot be read."""
    target = path or STATE_PATH
    try:
        data = json.loads(target.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return []
    except Exception as exc:
        logger.debug("Ignoring unreadable history file %s: %s", target, exc)
        return []
    return data if isinstance(data, list) else []


def save_history(snapshot: list[dict[str, object]], path: Path | None = None) -> None:
    """Write ``snapshot`` as JSON; filesystem errors are logged and ignored."""
    target = path or STATE_PATH
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(snapshot, indent=2) + "\n", encoding="utf-8")
    except Exception as exc:
        logger.debug("Could not write history file %s: %s", target, exc)
