"""Logging configuration.

Configures loguru for a short-lived command line run. Diagnostic output goes
to stderr so it never mixes with the status lines the CLI prints.
"""

from __future__ import annotations

import logging
import sys

from loguru import logger

# Standard library loggers of our HTTP and auth dependencies
_LIBRARY_LOGGERS = ("httpx", "httpcore", "google.auth", "urllib3")


def configure_logging(*, log_level: str = "WARNING", json: bool = False) -> None:
    """Configure loguru for the application.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json: If True, write one JSON object per record instead of text.
    """
    # Remove default handler
    logger.remove()

    if json:
        logger.add(
            sys.stderr,
            level=log_level,
            serialize=True,
            backtrace=False,
            diagnose=False,
        )
    else:
        logger.add(
            sys.stderr,
            level=log_level,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "<level>{message}</level>"
            ),
            colorize=None,
            backtrace=False,
            diagnose=False,
        )

    _intercept_standard_logging(log_level)


def _intercept_standard_logging(log_level: str) -> None:
    """Route standard library logging (httpx, google-auth) to loguru."""

    class InterceptHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            # Get corresponding loguru level
            try:
                level: str | int = logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

            # Find caller from where the logged message originated
            frame, depth = logging.currentframe(), 2
            while frame and frame.f_code.co_filename == logging.__file__:
                frame = frame.f_back
                depth += 1

            logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())

    # logging has no TRACE or SUCCESS level
    stdlib_level = {"TRACE": "DEBUG", "SUCCESS": "INFO"}.get(log_level, log_level)
    logging.basicConfig(handlers=[InterceptHandler()], level=stdlib_level, force=True)

    for name in _LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(stdlib_level)
