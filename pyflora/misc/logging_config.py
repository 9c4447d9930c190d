"""
Centralized logging configuration for pyflora.

All component loggers live under the ``pyflora`` namespace so a host
application can route or silence scatter output with a single handler.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

# Logger name for the library
PYFLORA_LOGGER_NAME = "pyflora"


def _level_from_env(default: int = logging.INFO) -> int:
    """Resolve the default level from PYFLORA_LOG_LEVEL (name or number)."""
    raw = os.getenv("PYFLORA_LOG_LEVEL", "")
    if not raw:
        return default
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else default


# Default log level
DEFAULT_LOG_LEVEL = _level_from_env()


def setup_logger(
    name: str = PYFLORA_LOGGER_NAME,
    level: int = DEFAULT_LOG_LEVEL,
    log_file: Optional[str] = None,
    console: bool = True
) -> logging.Logger:
    """
    Configure and return a logger for pyflora.

    Args:
        name: Logger name (default: 'pyflora')
        level: Logging level (default: INFO, or PYFLORA_LOG_LEVEL)
        log_file: Optional file path for log output
        console: Whether to output to console (default: True)

    Returns:
        Configured logger instance

    Examples:
        >>> logger = setup_logger()
        >>> logger.info("Scatter generated")

        >>> # Debug mode with a file copy of every message
        >>> logger = setup_logger(level=logging.DEBUG, log_file="scatter.log")
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, mode='a')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a namespaced pyflora logger, configuring the root one on first use.

    Args:
        name: Child logger name, e.g. "placement" -> 'pyflora.placement'

    Returns:
        Logger instance
    """
    logger_name = f"{PYFLORA_LOGGER_NAME}.{name}" if name else PYFLORA_LOGGER_NAME
    logger = logging.getLogger(logger_name)

    root = logging.getLogger(PYFLORA_LOGGER_NAME)
    if not root.handlers:
        setup_logger(PYFLORA_LOGGER_NAME)

    return logger
