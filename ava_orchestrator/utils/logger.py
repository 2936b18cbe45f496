"""
Logger module - Logging configuration and utilities

This module provides logging configuration with support for:
- File and console logging
- Configuration from .env
- Log rotation
"""

import logging
import logging.handlers
import sys
import os
from typing import Optional

ROOT_LOGGER_NAME = "ava_orchestrator"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Flag to track if the package root logger has been configured
_root_logger_initialized = False


def _ensure_root_logger_initialized():
    """
    Configure the package root logger with .env settings on first use.
    This is called automatically by get_logger().
    """
    global _root_logger_initialized

    if _root_logger_initialized:
        return

    _root_logger_initialized = True

    from ava_orchestrator.config.env_config import EnvConfig

    EnvConfig.load_env_file()

    log_folder = os.getenv("AGENT_LOG_FOLDER", "./logs")
    log_level = os.getenv("AGENT_LOG_LEVEL", "INFO").upper()
    enable_console = os.getenv("AGENT_ENABLE_CONSOLE_LOGGING", "true").lower() == "true"
    enable_file = os.getenv("AGENT_ENABLE_FILE_LOGGING", "false").lower() == "true"
    max_bytes = int(os.getenv("AGENT_LOG_MAX_BYTES", "10485760"))  # 10MB default
    backup_count = int(os.getenv("AGENT_LOG_BACKUP_COUNT", "5"))

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, log_level, logging.INFO))
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if enable_console:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    if enable_file:
        try:
            os.makedirs(log_folder, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                os.path.join(log_folder, f"{ROOT_LOGGER_NAME}.log"),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
        except OSError as e:
            root.warning(f"Failed to initialize file logging in {log_folder}: {e}")


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get or create a logger with standard formatting and .env configuration.

    Loggers under the ``ava_orchestrator`` namespace share the handlers of the
    package root logger; anything else gets its own console handler.

    Args:
        name: Logger name (typically __name__)
        level: Optional logging level override (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured logger instance
    """
    _ensure_root_logger_initialized()

    logger = logging.getLogger(name)

    if level:
        logger.setLevel(getattr(logging, level.upper()))

    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + ".") and not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    return logger
