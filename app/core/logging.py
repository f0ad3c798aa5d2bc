"""
Structured logging configuration using loguru.
"""
import sys
from loguru import logger
from app.core.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def _console_level() -> str:
    if settings.LOG_LEVEL:
        return settings.LOG_LEVEL.upper()
    return "DEBUG" if settings.ENVIRONMENT == "development" else "INFO"


logger.remove()
logger.add(sys.stdout, format=CONSOLE_FORMAT, level=_console_level(), colorize=True)

if settings.ENVIRONMENT == "production":
    logger.add(
        "logs/eventhub.log",
        rotation="500 MB",
        retention="10 days",
        compression="zip",
        format=FILE_FORMAT,
        level="INFO",
    )

__all__ = ["logger"]
