"""
Micropurchase — logging setup.

``micropurchase.app`` calls ``configure_logging()`` on import.  Bid decisions
and auth failures log at INFO through module loggers; chatty client and
driver loggers are held at WARNING.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from micropurchase import config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_QUIET_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "uvicorn.access")

_configured = False


def _resolve_level(name: Optional[str]) -> int:
    level = logging.getLevelName((name or "").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[str] = None) -> None:
    """Install a stdout handler on the root logger; later calls are no-ops.

    ``level`` overrides ``config.LOG_LEVEL``.
    """
    global _configured
    if _configured:
        return

    root = logging.getLogger()
    root.setLevel(_resolve_level(level or config.LOG_LEVEL))

    # uvicorn may have installed its own handlers already.
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True
