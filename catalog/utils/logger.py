"""
Logging for catalog modules: one stdout handler per logger, level from settings
"""
import logging
import sys
from catalog.config import get_settings

settings = get_settings()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def log_level() -> int:
    """LOG_LEVEL when set, otherwise DEBUG in debug mode and INFO elsewhere"""
    if settings.LOG_LEVEL:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        if isinstance(level, int):
            return level
    return logging.DEBUG if settings.DEBUG else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """Logger for a catalog module; repeated calls do not stack handlers"""
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    logger.setLevel(log_level())
    return logger
