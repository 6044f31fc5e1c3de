"""Log utilities."""

import logging

from rich.logging import RichHandler

_configured_level = logging.INFO


def set_level(level: str | int) -> None:
    """Set the level used for loggers handed out by ``get_logger``."""
    global _configured_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    _configured_level = level
    for name, logger in list(logging.root.manager.loggerDict.items()):
        if not isinstance(logger, logging.Logger):
            continue
        if name == "crudibase" or name.startswith("crudibase."):
            logger.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Retrieve logger with the provided name."""
    logger = logging.getLogger(name)
    logger.setLevel(_configured_level)
    logger.handlers = [RichHandler(show_path=False)]
    logger.propagate = False
    return logger
