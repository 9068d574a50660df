"""Engine configuration and the persisted JSON config file.

Host settings arrive as camelCase mappings. Invalid values are ignored in
favor of defaults so a bad setting never stops the engine.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "editnav"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineConfig:
    max_history_size: int = 100
    group_edits_within_lines: int = 1
    center_on_reveal: bool = True
    log_debug: bool = False
    promote_on_select: bool = False
    promote_on_move: bool = False
    restrict_picker_to_path: bool = False
    ignore_window_ms: int = 500

    @classmethod
    def from_mapping(cls, data: Mapping[str, object], base: EngineConfig | None = None) -> EngineConfig:
        """Overlay recognized keys from ``data`` onto ``base`` (or defaults).

        Both ``maxHistorySize`` and ``max_history_size`` spellings are
        accepted. Values of the wrong type are skipped; integer settings are
        clamped to their minimums.
        """
        config = base if base is not None else cls()
        updates: dict[str, object] = {}
        for field in fields(cls):
            raw = _lookup(data, field.name)
            if raw is _MISSING:
                continue
            default = getattr(config, field.name)
            if isinstance(default, bool):
                if isinstance(raw, bool):
                    updates[field.name] = raw
                continue
            if isinstance(raw, bool) or not isinstance(raw, int):
                continue
            updates[field.name] = max(_INT_MINIMUMS.get(field.name, 0), raw)
        return replace(config, **updates)

    def to_mapping(self) -> dict[str, object]:
        return {_camel(field.name): getattr(self, field.name) for field in fields(self)}


_MISSING = object()

_INT_MINIMUMS = {"max_history_size": 1}

# Legacy setting name for the ignore window.
_ALIASES = {"ignore_window_ms": ("ignoreTimeDuration",)}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _lookup(data: Mapping[str, object], name: str) -> object:
    for key in (name, _camel(name), *_ALIASES.get(name, ())):
        if key in data:
            return data[key]
    return _MISSING


# Editor-style settings files namespace each extension's keys.
SETTINGS_SECTION = "editHistory"


def _read_config_file() -> dict[str, object]:
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.debug("Ignoring unreadable config file %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def load_settings() -> dict[str, object]:
    """Return the engine settings stored in the config file.

    Settings are read from the ``editHistory`` section when present, else
    from the top level. A missing or malformed file yields no settings.
    """
    data = _read_config_file()
    section = data.get(SETTINGS_SECTION)
    return dict(section) if isinstance(section, dict) else data


def load_engine_config(base: EngineConfig | None = None) -> EngineConfig:
    return EngineConfig.from_mapping(load_settings(), base=base)


def save_engine_config(config: EngineConfig) -> None:
    """Write ``config`` into the settings section, keeping other keys."""
    data = _read_config_file()
    data[SETTINGS_SECTION] = config.to_mapping()
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.debug("Could not write config file %s: %s", CONFIG_PATH, exc)
