"""loguru configuration for stores and the CLI."""

import sys

from loguru import logger

from fraud_surveillance.config.settings import settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> | <level>{message}</level> | {extra}"
)


def configure_logging(level: str | None = None, log_format: str | None = None) -> None:
    """
    Replace loguru's default sink with one matching the settings.

    A terminal with ``log_format="console"`` gets colorized lines on stderr.
    Everything else gets one serialized JSON record per line on stderr, so
    CLI output on stdout stays parseable.

    Args:
        level: Overrides settings.log_level
        log_format: Overrides settings.log_format
    """
    level = (level or settings.log_level).upper()
    log_format = (log_format or settings.log_format).lower()

    logger.remove()
    logger.configure(extra={"component": "fraud_surveillance"})

    if log_format == "console" and sys.stderr.isatty():
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)
    else:
        logger.add(sys.stderr, format="{message}", level=level, serialize=True, diagnose=False)


def get_logger(component: str):
    """Return the shared logger with ``component`` bound, e.g. ``get_logger("EntityStore")``."""
    return logger.bind(component=component)


configure_logging()

__all__ = ["logger", "get_logger", "configure_logging"]
