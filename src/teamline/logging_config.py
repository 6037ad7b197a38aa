# SPDX-License-Identifier: MIT

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "teamline"
LOG_LEVEL_ENV_VAR = "TEAMLINE_LOG_LEVEL"

_configured = False


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the package logger to write through rich on stderr.

    The TEAMLINE_LOG_LEVEL environment variable overrides ``level``. Calling
    this more than once only adjusts the level.
    """
    global _configured

    env_level = os.getenv(LOG_LEVEL_ENV_VAR)
    if env_level:
        level = env_level
    log_level = getattr(logging, (level or "WARNING").upper(), logging.WARNING)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    if _configured:
        return

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.handlers.clear()
    logger.addHandler(handler)

    _configured = True
