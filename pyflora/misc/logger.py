"""
Component logger for pyflora.

Wraps the namespaced stdlib loggers from ``logging_config`` with the
verbose switch every pyflora component accepts:
- INFO and DEBUG are only emitted when ``verbose`` is True
- WARNING and ERROR are always emitted
- Messages carry a ``[pyflora][Component]`` prefix
"""

import logging
from enum import Enum
from typing import Optional

from .logging_config import get_logger


class LogLevel(Enum):
    """Log level enumeration."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR


class FloraLogger:
    """
    Per-component logger.

    Usage:
        logger = FloraLogger(verbose=True, name="Placement")
        logger.info("Generated 120 plants")
        logger.warning("Surface sampler raised, candidate skipped")
    """

    def __init__(self, verbose: bool = True, name: Optional[str] = None, min_level: LogLevel = LogLevel.INFO):
        """
        Args:
            verbose: If False, suppresses INFO and DEBUG messages
            name: Component name included in messages and in the logger name
            min_level: Minimum level shown when verbose (defaults to INFO)
        """
        self.verbose = verbose
        self.name = name
        self.min_level = min_level
        self._logger = get_logger(name.lower() if name else None)

    def _format_message(self, message: str) -> str:
        prefix = "[pyflora]"
        if self.name:
            prefix += f"[{self.name}]"
        return f"{prefix} {message}"

    def _should_log(self, level: LogLevel) -> bool:
        # Always log warnings and errors
        if level in (LogLevel.WARNING, LogLevel.ERROR):
            return True
        if not self.verbose:
            return False
        return level.value >= self.min_level.value

    def log(self, message: str, level: LogLevel = LogLevel.INFO):
        """Emit ``message`` at ``level`` if the verbose settings allow it."""
        if self._should_log(level):
            self._logger.log(level.value, self._format_message(message))

    def debug(self, message: str):
        self.log(message, LogLevel.DEBUG)

    def info(self, message: str):
        self.log(message, LogLevel.INFO)

    def warning(self, message: str):
        self.log(message, LogLevel.WARNING)

    def error(self, message: str):
        self.log(message, LogLevel.ERROR)


def create_logger(verbose: bool = True, name: Optional[str] = None) -> FloraLogger:
    """
    Factory function to create a component logger.

    Args:
        verbose: If False, suppresses INFO and DEBUG messages
        name: Component name (e.g., "Placement", "Regeneration")
    """
    return FloraLogger(verbose=verbose, name=name)
