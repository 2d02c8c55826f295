"""
Logger setup: attach rotating file (JSON) and console handlers from config.
"""
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from schemedesk.core.logger.config import LoggerConfig
from schemedesk.core.logger.formatters import JsonFormatter, PlainConsoleFormatter

_configured: Optional[LoggerConfig] = None


def _level(config: LoggerConfig) -> int:
    return getattr(logging, config.level.upper(), logging.INFO)


def build_rotating_file_handler(config: LoggerConfig) -> RotatingFileHandler:
    os.makedirs(config.log_dir, exist_ok=True)
    path = os.path.join(config.log_dir, f"{config.log_file_basename}.log")
    handler = RotatingFileHandler(
        path,
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    handler.setLevel(_level(config))
    handler.setFormatter(JsonFormatter())
    return handler


def build_console_handler(config: LoggerConfig) -> logging.StreamHandler:
    handler = logging.StreamHandler()
    handler.setLevel(_level(config))
    handler.setFormatter(PlainConsoleFormatter())
    return handler


def configure(config: Optional[LoggerConfig] = None) -> LoggerConfig:
    """
    Configure the ``schemedesk`` root logger. Uses LoggerConfig.from_env() when
    config is None. Safe to call more than once (handlers are replaced).
    """
    global _configured
    config = config or LoggerConfig.from_env()
    root = logging.getLogger(config.root_name)
    root.setLevel(_level(config))
    root.handlers.clear()

    if config.console:
        root.addHandler(build_console_handler(config))

    if config.file_rotating and config.log_dir and config.log_dir.strip():
        try:
            root.addHandler(build_rotating_file_handler(config))
        except OSError:
            root.warning("Could not create log dir %s, skipping file handler", config.log_dir)

    root.propagate = False
    _configured = config
    return config


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger for ``name``, configuring the root from env on first use.
    Pass ``__name__`` from schemedesk modules so records reach the root handlers.
    """
    if _configured is None:
        configure()
    return logging.getLogger(name)
