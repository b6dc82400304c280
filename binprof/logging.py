from __future__ import annotations

import sys
from typing import Any

from loguru import logger

DEFAULT_FORMAT = "{time:HH:mm:ss} | {level:<7} | {name}:{line} | {message}"


def configure_logging(level: str = "INFO", sink: Any = None) -> int:
    """
    Route ``binprof`` log output to ``sink`` (stderr by default).

    Existing handlers are removed first so repeated calls do not duplicate
    lines. Returns the loguru handler id.
    """

    logger.remove()
    handler_id = logger.add(
        sys.stderr if sink is None else sink,
        level=level.upper(),
        format=DEFAULT_FORMAT,
        backtrace=False,
        diagnose=False,
    )
    logger.enable("binprof")
    return handler_id
