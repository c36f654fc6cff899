"""
Process-wide logging for MailMind.

Batch classification and CV extraction run on worker threads
("ThreadPoolExecutor-*", "cv-extract_*"), so every line carries the thread
name. MAILMIND_LOG_LEVEL picks the level; unknown names fall back to INFO.
"""

from __future__ import annotations

import logging
import os
from typing import Final

_HANDLER_ATTACHED: bool = False
LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)-8s [%(threadName)s] %(name)s: %(message)s"


def resolve_level() -> int:
    level_name = os.getenv("MAILMIND_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """Return a module logger; the first call attaches the shared stream handler."""
    global _HANDLER_ATTACHED

    level = resolve_level()

    if not _HANDLER_ATTACHED:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root = logging.getLogger()
        root.addHandler(handler)
        root.setLevel(level)
        _HANDLER_ATTACHED = True

    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger
