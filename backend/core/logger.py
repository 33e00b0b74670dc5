"""
Stamping Engine Logging
=======================
Loguru sinks for the stamping service.

Every record carries a `component` extra (the module that logged it), so
console and file lines show which renderer or cache produced them. Records
from uvicorn, fastapi and pypdf arrive through the stdlib bridge and are
tagged with their stdlib logger name.
"""

from __future__ import annotations
import sys
import logging
from pathlib import Path
from loguru import logger

from core.config import Settings, get_settings

LOG_DIR = Path(__file__).parent.parent / "logs"
LOG_FILE = LOG_DIR / "stamping.log"

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> "
    "<level>{level: <7}</level> "
    "<cyan>{extra[component]}</cyan> "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <7} | {extra[component]}:{line} | {message}"

BRIDGED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "pypdf")


class StdlibBridge(logging.Handler):
    """Forward stdlib records (pypdf parse warnings, uvicorn access lines) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore
            depth += 1

        logger.bind(component=record.name).opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logger(settings: Settings) -> None:
    """
    Install sinks from settings: console always, a rotating file when
    STAMPING_LOG_TO_FILE is set. Safe to call again after changing settings.
    """
    logger.remove()
    logger.configure(extra={"component": "stamping"})

    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=settings.log_level, colorize=True, diagnose=False)

    if settings.log_to_file:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(LOG_FILE),
            format=FILE_FORMAT,
            level=settings.log_level,
            rotation="50 MB",
            retention="10 days",
            compression="zip",
            diagnose=False,
            enqueue=True,
        )

    logging.basicConfig(handlers=[StdlibBridge()], level=0, force=True)
    for name in BRIDGED_LOGGERS:
        logging.getLogger(name).handlers = [StdlibBridge()]

    logger.debug(f"Logging at {settings.log_level}, file={'on' if settings.log_to_file else 'off'}")


def get_logger(name: str = "stamping"):
    """Logger tagged with the calling module, e.g. get_logger(__name__)."""
    return logger.bind(component=name)


setup_logger(get_settings())
