"""Logging configuration helpers."""
from __future__ import annotations

import sys

from loguru import logger


def configure_logging(level: str = "INFO") -> None:
    """Configure loguru with a friendly default sink on stderr."""
    logger.remove()
    logger.add(
        sink=lambda msg: print(msg, end="", file=sys.stderr),
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )
