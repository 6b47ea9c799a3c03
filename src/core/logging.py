"""Configuración de logging (loguru).

Por qué aquí:
- Los adaptadores solo llaman a `logger.debug/warning`; quién decide los
  sinks y el nivel es el punto de entrada (CLI), una sola vez.
"""

from __future__ import annotations

import sys

from loguru import logger

from core.config import AppSettings

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logging(settings: AppSettings | None = None) -> None:
    """Reemplaza el sink por defecto de loguru según `AppSettings`."""

    settings = settings or AppSettings()
    level = settings.log_level.upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format=_CONSOLE_FORMAT)

    if settings.log_file:
        logger.add(
            str(settings.log_file),
            level=level,
            format=_FILE_FORMAT,
            rotation="1 day",
            retention="30 days",
            compression="zip",
        )
