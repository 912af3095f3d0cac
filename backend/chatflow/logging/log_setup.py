"""
Root logger setup driven by ``LoggingConfig``.
"""

from __future__ import annotations

import logging
from typing import Optional

from chatflow.config import LoggingConfig, get_config

_HANDLER_NAME = "chatflow"


def setup_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """Attach one stream handler to the ``chatflow`` logger.

    Calling it again only updates the level and format of the
    existing handler.
    """
    cfg = config or get_config(LoggingConfig)
    root = logging.getLogger("chatflow")
    level = logging.getLevelName(cfg.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = next(
        (h for h in root.handlers if h.get_name() == _HANDLER_NAME), None
    )
    if handler is None:
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        root.addHandler(handler)

    handler.setFormatter(logging.Formatter(cfg.format))
    root.setLevel(level)
    root.debug(f"Logging configured at {cfg.level.upper()}")
    return root
