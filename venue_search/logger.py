"""Logger loguru partagé : console colorée et fichiers journaliers sous LOG_DIR."""
import os
import sys

from loguru import logger

from venue_search.config import settings

CONSOLE_FORMAT = (
    "<white>{time:YYYY-MM-DD HH:mm:ss.SSS}</white> | "
    "<level>{level: <8}</level> | "
    "<light-black>{name}:{function}:{line}</light-black> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"

# fichier -> (niveau minimal, niveaux retenus ; None = tous à partir du minimum)
FILE_SINKS = {
    "debug.log": ("DEBUG", {"DEBUG"}),
    "info.log": ("INFO", {"INFO", "SUCCESS", "WARNING"}),
    "error.log": ("ERROR", None),
}


def _level_filter(levels):
    if levels is None:
        return None
    return lambda record: record["level"].name in levels


def configure_logging() -> None:
    """Remplace le handler par défaut de loguru par ceux de l'application."""
    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL, format=CONSOLE_FORMAT, colorize=True, backtrace=True)

    if not settings.LOG_TO_FILE:
        return

    os.makedirs(settings.LOG_DIR, exist_ok=True)
    for filename, (level, levels) in FILE_SINKS.items():
        logger.add(
            os.path.join(settings.LOG_DIR, filename),
            level=level,
            format=FILE_FORMAT,
            filter=_level_filter(levels),
            rotation="00:00",
            retention="30 days",
            compression="zip",
            encoding="utf-8",
            backtrace=level == "ERROR",
        )


configure_logging()
