"""Logger setup for the blog service."""
import logging
from logging.handlers import RotatingFileHandler

import config

FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = None, log_file: str = None) -> logging.Logger:
    """Attach console and rotating file handlers to the "blog" logger once"""
    logger = logging.getLogger("blog")
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level or config.LOG_LEVEL)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_file = config.LOG_FILE if log_file is None else log_file
    if log_file:
        file_handler = RotatingFileHandler(log_file, maxBytes=2000000, backupCount=3, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
