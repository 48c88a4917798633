"""Logging setup shared by the CLI and the library."""
import logging

from rich.logging import RichHandler

LOGGER_NAME = "study_planner"


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """Attach a RichHandler to the package logger (once) and set its level."""
    logger = logging.getLogger(LOGGER_NAME)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False
    return logger
