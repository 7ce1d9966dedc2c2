"""
Logging utilities for relative profile collection.
"""


from pathlib import Path
from structlog.stdlib import LoggerFactory
from typing import Any, Dict, Optional

import logging
import structlog
import sys
import time


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    log_format: str = "json"
) -> structlog.BoundLogger:
    """
    Set up structured logging for a collection run.
    
    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        log_format: Log format ("json" or "console")
    
    Returns:
        Configured logger instance
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if log_format == "json" else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    
    # Make sure the log_file directory exists if it is not None
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr if log_file is None else open(log_file, "w"),
        level=getattr(logging, log_level.upper()),
        force=True,
    )
    
    return structlog.get_logger("relprofile")


class OperationLogger:
    """
    Context manager logging the start, end and duration of an operation.

    Context added while the operation runs is attached to every later event,
    including the final success or failure event.
    """

    def __init__(self, logger: structlog.BoundLogger, operation: str):
        self.logger = logger
        self.operation = operation
        self.context: Dict[str, Any] = {}
        self._started: Optional[float] = None

    def _fields(self, **kwargs) -> Dict[str, Any]:
        return {"operation": self.operation, **self.context, **kwargs}

    def __enter__(self):
        self._started = time.perf_counter()
        self.logger.info(f"Starting {self.operation}", **self._fields())
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.perf_counter() - self._started
        if exc_type is None:
            self.logger.info(
                f"Completed {self.operation}",
                **self._fields(duration_seconds=duration, status="success"),
            )
            return
        self.logger.error(
            f"Failed {self.operation}",
            **self._fields(
                duration_seconds=duration,
                status="error",
                error_type=exc_type.__name__,
                error_message=str(exc_val),
            ),
        )

    def add_context(self, **kwargs):
        """Attach fields to the events logged from here on."""
        self.context.update(kwargs)

    def log_progress(self, message: str, **kwargs):
        self.logger.info(message, **self._fields(**kwargs))


def log_error(logger: structlog.BoundLogger, error: Exception, context: Optional[Dict[str, Any]] = None):
    """Log an error with context."""
    logger.error(
        "Collection error",
        error_type=type(error).__name__,
        error_message=str(error),
        context=context or {}
    )
