"""
Module-level structured logging.

Every ``get_logger("services.zoom")`` is a child of the ``session_scheduler``
logger, which owns the handlers; the children only propagate.
"""

import logging
import sys

from session_scheduler.config import settings

ROOT_NAME = "session_scheduler"

# chatty client libraries, only worth hearing about when something breaks
_QUIET_LOGGERS = ("googleapiclient.discovery_cache", "httpx", "httpcore")


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_NAME)
    if root.handlers:
        return root

    root.setLevel(settings.LOG_LEVEL)
    root.propagate = False
    fmt = logging.Formatter(
        "[%(asctime)s] %(levelname)-8s %(name)-25s  %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # stdout is reserved for the MCP stdio transport
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(fmt)
    root.addHandler(console)

    if settings.LOG_FILE:
        file_handler = logging.FileHandler(settings.LOG_FILE, encoding="utf-8")
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return root


def get_logger(name: str) -> logging.Logger:
    _configure_root()
    return logging.getLogger(f"{ROOT_NAME}.{name}")
