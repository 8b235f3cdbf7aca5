"""
Centralized logging configuration.

One "RagChat" logger is shared by every pipeline stage. Console output is
short and meant for the interactive CLI; the rotating file log keeps the
full record (module and line) of every absorbed fault.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from rag_chat.config.settings import config

CONSOLE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"


def _level(name: Optional[str], fallback: int = logging.INFO) -> int:
    if not name:
        return fallback
    return getattr(logging, name.upper(), fallback)


def setup_logger(name: str = "RagChat", level: Optional[str] = None) -> logging.Logger:
    """
    Set up and configure the application logger.

    Args:
        name: Name of the logger (default: "RagChat")
        level: Logging level for the file log (default: LOG_LEVEL)

    Returns:
        logging.Logger: Configured logger instance. Calling this again with
        the same name returns the already configured logger.
    """
    file_level = _level(level or config.LOG_LEVEL)
    console_level = _level(config.LOG_CONSOLE_LEVEL, file_level)

    logger = logging.getLogger(name)
    logger.setLevel(min(file_level, console_level))
    logger.propagate = False

    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    logger.addHandler(console_handler)

    config.LOGS_DIR.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        config.LOG_FILE,
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(file_handler)

    return logger


logger = setup_logger()
