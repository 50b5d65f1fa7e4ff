"""
Logging setup shared by the CLI and the server.
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler


ENV_LOG_LEVEL = "TRANSCRIPT_SEARCH_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"
ROOT_LOGGER_NAME = "transcript_search"


def configure_logging(level: str | None = None) -> logging.Logger:
    """
    Attach a stderr Rich handler to the package logger.

    Safe to call more than once; the handler is only installed the first
    time. An explicit ``level`` always applies. Without one, the first call
    uses TRANSCRIPT_SEARCH_LOG_LEVEL, then INFO, and later calls keep the
    level already set.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    installed = any(isinstance(handler, RichHandler) for handler in logger.handlers)

    if level is not None or not installed:
        level_name = (level or os.getenv(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper()
        logger.setLevel(getattr(logging, level_name, logging.INFO))

    if not installed:
        # stdout is reserved for results
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)

    return logger
