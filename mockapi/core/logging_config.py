"""
Logging configuration.

Sets up the package logger; modules log through logging.getLogger(__name__).
"""
import logging
import sys


def setup_logging(level: int | str = logging.INFO) -> logging.Logger:
    """
    Configure the 'mockapi' logger namespace.

    Args:
        level: logging level as an int or a name such as "DEBUG".
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger("mockapi")
    logger.setLevel(level)

    # avoid duplicate lines when the app factory runs more than once
    if logger.hasHandlers():
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logger.addHandler(handler)
    return logger
