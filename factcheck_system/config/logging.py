"""Production-grade logging configuration using loguru with automatic dev/prod detection."""

import sys
from typing import Optional

from loguru import logger

from factcheck_system.config.settings import settings


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure loguru based on environment settings.

    Behavior:
    - Development (TTY + console format): Colorized, human-readable output
    - Production (non-TTY or json format): JSON lines on stderr
    - Level comes from ``level`` when given, else LOG_LEVEL
    """
    logger.remove()
    level = (level or settings.log_level).upper()

    is_tty = sys.stderr.isatty()
    use_console_format = settings.log_format.lower() == "console"

    if is_tty and use_console_format:
        logger.add(
            sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[component]}</cyan> | <level>{message}</level>",
            level=level,
            colorize=True,
        )
    else:
        # stderr keeps stdout clean for `factcheck check --json`
        logger.add(
            sys.stderr,
            format="{message}",
            level=level,
            serialize=True,
            diagnose=False,  # Disable variable inspection for security
        )


def get_logger(component: str):
    """
    Get a logger instance bound to a specific component name.

    Args:
        component: Component/module name for log context

    Returns:
        Logger instance with component context

    Example:
        >>> log = get_logger("extraction.claims")
        >>> log.info("Extracting claims")
    """
    return logger.bind(component=component)


# Configure logging on module import
configure_logging()

__all__ = ["logger", "get_logger", "configure_logging"]
