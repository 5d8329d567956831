"""Logging utilities for mailsend.

This module provides a centralized logger helper. Level, handlers and format
are configured once by ``configure_logging()`` from the CLI entry point, so
library modules never add handlers of their own.

Example:
    Typical usage in a module::

        from mailsend.logger import get_logger

        logger = get_logger("Builder")
        logger.debug("Built message for %s", recipient)
"""

import logging

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str = "MailSend") -> logging.Logger:
    """Retrieve a logger instance.

    Args:
        name: The logger name. Defaults to "MailSend".

    Returns:
        A ``logging.Logger`` instance bound to the given name.
    """
    return logging.getLogger(name)


def configure_logging(level: str = "WARNING") -> None:
    """Configure root logging for a CLI run.

    Unknown level names fall back to WARNING.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        force=True,
    )
