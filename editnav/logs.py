"""Debug logging switch for the ``editnav`` logger hierarchy.

Modules log through ``logging.getLogger(__name__)``; this module owns the one
flag that decides whether their debug records are emitted.
"""

from __future__ import annotations

import logging

LOGGER_NAME = "editnav"
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

logger = logging.getLogger(LOGGER_NAME)

_handler: logging.Handler | None = None
_debug_enabled: bool | None = None


def _ensure_handler() -> None:
    global _handler
    if _handler is not None:
        return
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_handler)


def set_debug_logging(enabled: bool) -> None:
    """Enable or disable debug output for every ``editnav`` module.

    Flipping the flag is itself logged, mirroring how the setting is
    toggled from the host configuration.
    """
    global _debug_enabled
    enabled = bool(enabled)
    previous = _debug_enabled
    _debug_enabled = enabled
    _ensure_handler()
    if enabled:
        logger.setLevel(logging.DEBUG)
        if previous is False:
            logger.debug("Enabling logging")
        return
    if previous:
        logger.debug("Disabling logging")
    logger.setLevel(logging.WARNING)
