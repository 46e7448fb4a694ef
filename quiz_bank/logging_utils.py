"""Shared logger setup for quiz_bank modules."""

from __future__ import annotations

import logging
import os
from typing import Optional

_HANDLER_ATTACHED: bool = False
_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level_name: Optional[str] = None) -> int:
    name = (level_name or os.getenv("QUIZ_BANK_LOG_LEVEL", "INFO")).upper()
    return getattr(logging, name, logging.INFO)


def configure_logging(level: Optional[str] = None) -> None:
    """Attach the stream handler once and set the root level."""
    global _HANDLER_ATTACHED

    root = logging.getLogger()
    if not _HANDLER_ATTACHED:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
        _HANDLER_ATTACHED = True
    root.setLevel(_resolve_level(level))


def get_logger(name: str) -> logging.Logger:
    """Return a module logger configured with a single stream handler."""
    if not _HANDLER_ATTACHED:
        configure_logging()
    return logging.getLogger(name)
