"""Public package surface for editnav.

Exports the engine and its configuration for embedding hosts, plus ``main``
for programmatic CLI invocation.
"""

from __future__ import annotations

from .config import EngineConfig
from .engine import EditHistoryEngine, TargetNotFound
from .model import Edit, Location, MoveCursor, RevealMode


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "Edit",
    "EditHistoryEngine",
    "EngineConfig",
    "Location",
    "MoveCursor",
    "RevealMode",
    "TargetNotFound",
    "main",
]
