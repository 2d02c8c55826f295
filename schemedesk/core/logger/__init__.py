"""
schemedesk logger: rotating JSON file + console.

Usage:
    from schemedesk.core.logger import configure, LoggerConfig

    # Once at startup; reads LOG_LEVEL, LOG_DIR, ... when called without args
    configure()

    # In modules
    logger = logging.getLogger(__name__)
    logger.info("Order %s picked up", order_id, extra={"order_id": order_id})
"""
from schemedesk.core.logger.config import LoggerConfig
from schemedesk.core.logger.formatters import JsonFormatter, PlainConsoleFormatter
from schemedesk.core.logger.setup import (
    build_console_handler,
    build_rotating_file_handler,
    configure,
    get_logger,
)

__all__ = [
    "LoggerConfig",
    "JsonFormatter",
    "PlainConsoleFormatter",
    "configure",
    "get_logger",
    "build_rotating_file_handler",
    "build_console_handler",
]
