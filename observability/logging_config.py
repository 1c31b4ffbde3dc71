"""Structured JSON logging to stderr."""

import logging
import os
import sys

from pythonjsonlogger import jsonlogger

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def configure_logging(level: str | int = LOG_LEVEL) -> logging.Handler:
    """Install a single stderr handler with a JSON formatter on the root logger.

    Existing root handlers are removed so repeated calls don't duplicate output.

    Returns:
        The installed handler.
    """
    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)

    # SDK and transport loggers are chatty at DEBUG
    for name in ("httpx", "httpcore", "urllib3", "openai", "anthropic"):
        logging.getLogger(name).setLevel(logging.WARNING)

    return handler
