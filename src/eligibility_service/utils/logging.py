"""Logging configuration.

Records go to stderr so the CLI's JSON on stdout stays machine-readable.
Staging and production emit one JSON object per record; structured fields
passed via ``extra=`` become top-level keys there.

Loggers are process-global, so format and level come from the
environment-derived settings, not from a ``Settings`` handed to ``create_app``.
"""

import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

from eligibility_service.config import settings

STRUCTURED_ENVIRONMENTS = ("staging", "production")


def _build_formatter(environment: str) -> logging.Formatter:
    if environment in STRUCTURED_ENVIRONMENTS:
        return jsonlogger.JsonFormatter(
            fmt="%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
            rename_fields={"asctime": "timestamp", "levelname": "level"},
        )
    return logging.Formatter(
        fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def get_logger(name: str) -> logging.Logger:
    """Return a logger with the service handler attached once.

    Args:
        name: Logger name (usually __name__)
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(_build_formatter(settings.environment))
        logger.addHandler(handler)
        logger.setLevel(settings.log_level)

    return logger


def log_event(logger: logging.Logger, event: str, **payload: Any) -> None:
    """Emit a single structured record keyed by ``event``."""
    logger.info(event, extra={"event": event, **payload})
