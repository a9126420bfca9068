"""Logging setup shared by the CLI and the web app."""
import logging
import os

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logger(name: str, level: str = None) -> logging.Logger:
    """Set up a logger with a console handler.

    Level comes from the argument, then PALETTE_LOG_LEVEL, then INFO.
    """
    logger = logging.getLogger(name)
    level_name = (level or os.environ.get('PALETTE_LOG_LEVEL', 'INFO')).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    # Avoid adding multiple handlers
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    return logger
