#!/usr/bin/env python3
"""Structured logging for pikesre.

This module provides a structured logger with:
- Log levels mirroring the standard logging module
- Key-value context appended to every message
- Thread-local context stacks
- Console and rotating file handlers

The command algebra is pure and never logs. The lexer compiler and the
pattern engine report construction and cascade events at DEBUG level.

Example:
    >>> logger = Logger(level=LogLevel.DEBUG)
    >>> logger.debug("Rule added", rule="audit", watch="/users/**")
    >>> with logger.add_context(document="/users/123"):
    ...     logger.debug("Reaction emitted")
"""

import logging
import logging.handlers
import threading
from contextlib import contextmanager
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union


class LogLevel(IntEnum):
    """Log levels matching Python's logging module."""

    DEBUG = logging.DEBUG  # 10
    INFO = logging.INFO  # 20
    WARNING = logging.WARNING  # 30
    ERROR = logging.ERROR  # 40
    CRITICAL = logging.CRITICAL  # 50


class Logger:
    """Structured logger with context support.

    Wraps a standard library logger. Context passed as keyword arguments,
    or pushed with add_context(), is rendered as ``msg | key=value ...``
    and also attached to the record as ``record.context``.
    """

    _context_stack = threading.local()

    def __init__(
        self,
        name: str = "pikesre",
        level: Union[LogLevel, str] = LogLevel.WARNING,
        handlers: Optional[List[logging.Handler]] = None,
    ):
        """Initialize logger.

        Args:
            name: Logger name for identification
            level: Minimum log level to output
            handlers: Optional list of logging handlers (default: console)
        """
        self.name = name
        self.logger = logging.getLogger(name)
        self.set_level(level)

        if handlers is None:
            handlers = [self._create_console_handler()]

        self.logger.handlers.clear()
        for handler in handlers:
            self.logger.addHandler(handler)

        self.logger.propagate = False

    def _create_console_handler(self) -> logging.StreamHandler:
        """Create default console handler with formatting."""
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        return handler

    def create_file_handler(
        self,
        filename: Union[str, Path],
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
    ) -> logging.handlers.RotatingFileHandler:
        """Create rotating file handler.

        Args:
            filename: Path to log file
            max_bytes: Maximum size before rotation
            backup_count: Number of backup files to keep

        Returns:
            Configured rotating file handler
        """
        handler = logging.handlers.RotatingFileHandler(
            filename, maxBytes=max_bytes, backupCount=backup_count
        )
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        return handler

    def add_handler(self, handler: logging.Handler) -> None:
        """Add an output handler."""
        self.logger.addHandler(handler)

    def remove_handler(self, handler: logging.Handler) -> None:
        """Remove an output handler."""
        self.logger.removeHandler(handler)

    def set_level(self, level: Union[LogLevel, str]) -> None:
        """Set the minimum log level.

        Args:
            level: New log level (LogLevel or level name)
        """
        if isinstance(level, str):
            level = LogLevel[level.upper()]
        self.logger.setLevel(level)

    def get_level(self) -> LogLevel:
        """Get current log level."""
        return LogLevel(self.logger.level)

    def is_enabled_for(self, level: Union[LogLevel, str]) -> bool:
        """Check if logger would output at the given level."""
        if isinstance(level, str):
            level = LogLevel[level.upper()]
        return self.logger.isEnabledFor(level)

    def _get_context(self) -> Dict[str, Any]:
        """Merge the thread-local context stack into one dictionary."""
        if not hasattr(self._context_stack, "stack"):
            self._context_stack.stack = [{}]

        context: Dict[str, Any] = {}
        for ctx in self._context_stack.stack:
            context.update(ctx)
        return context

    @staticmethod
    def _format_message(msg: str, context: Dict[str, Any]) -> str:
        """Append ``key=value`` pairs to the message."""
        if context:
            ctx_str = " ".join(f"{k}={v}" for k, v in context.items())
            return f"{msg} | {ctx_str}"
        return msg

    @contextmanager
    def add_context(self, **kwargs: Any) -> Iterator[None]:
        """Context manager pushing temporary context for this thread.

        Example:
            >>> with logger.add_context(rule="audit"):
            ...     logger.debug("Evaluating")
        """
        if not hasattr(self._context_stack, "stack"):
            self._context_stack.stack = [{}]

        self._context_stack.stack.append(kwargs)
        try:
            yield
        finally:
            self._context_stack.stack.pop()

    def _log(self, level: LogLevel, msg: str, context: Dict[str, Any], **kwargs: Any) -> None:
        if not self.logger.isEnabledFor(level):
            return
        combined = self._get_context()
        combined.update(context)
        self.logger.log(level, self._format_message(msg, combined), extra={"context": combined}, **kwargs)

    def debug(self, msg: str, **context: Any) -> None:
        """Log debug message."""
        self._log(LogLevel.DEBUG, msg, context)

    def info(self, msg: str, **context: Any) -> None:
        """Log info message."""
        self._log(LogLevel.INFO, msg, context)

    def warning(self, msg: str, **context: Any) -> None:
        """Log warning message."""
        self._log(LogLevel.WARNING, msg, context)

    def error(self, msg: str, **context: Any) -> None:
        """Log error message."""
        self._log(LogLevel.ERROR, msg, context)

    def exception(self, msg: str, exc: Exception, **context: Any) -> None:
        """Log exception with traceback.

        Args:
            msg: Log message
            exc: Exception to log
            **context: Additional context key-value pairs
        """
        context["exception_type"] = type(exc).__name__
        context["exception_message"] = str(exc)
        self._log(LogLevel.ERROR, msg, context, exc_info=exc)


# Global logger instance
_global_logger: Optional[Logger] = None


def get_logger(name: str = "pikesre") -> Logger:
    """Get or create the process-wide logger.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    global _global_logger
    if _global_logger is None or _global_logger.name != name:
        _global_logger = Logger(name=name)
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Set the global logger instance."""
    global _global_logger
    _global_logger = logger


def configure_logging(config: Any) -> Logger:
    """Build the global logger from configuration.

    Reads ``pikesre.logging.level`` and ``pikesre.logging.file`` from a
    ConfigManager (or any object with a compatible ``get``).

    Args:
        config: Configuration manager

    Returns:
        The configured global logger
    """
    from pikesre.core.constants import ConfigKey

    logger = Logger(level=config.get(ConfigKey.LOGGING_LEVEL, "WARNING"))
    log_file = config.get(ConfigKey.LOGGING_FILE)
    if log_file:
        logger.add_handler(logger.create_file_handler(log_file))
    set_global_logger(logger)
    return logger
