"""
Structured Logging Utilities

Provides logging setup and helpers for adding structured context to log
messages emitted by the lending services.
"""

import inspect
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from functools import wraps
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from exceptions import BusinessError, ValidationError


# Context variable for request-scoped logging context
_logging_context: ContextVar[Dict[str, Any]] = ContextVar('logging_context', default={})

# Argument names that identify the entities an operation touches
_CONTEXT_KEYS = ("user_id", "item_id", "loan_id", "reservation_id", "fine_id")

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(log_dir: Optional[Path] = None, level: str = "INFO") -> logging.Logger:
    """
    Configure the root logger with console and (optionally) rotating file output.

    Args:
        log_dir: Directory for lending.log; console only when None
        level: Root log level name

    Returns:
        The configured root logger
    """
    log_formatter = logging.Formatter(LOG_FORMAT)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    root_logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        # 10MB per file, keep 5 backups
        file_handler = RotatingFileHandler(
            log_dir / "lending.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(log_formatter)
        root_logger.addHandler(file_handler)

    return root_logger


class StructuredLogger:
    """
    Wrapper around standard logger that adds structured context.

    Usage:
        logger = StructuredLogger(__name__)
        logger.info("Loan created", extra={"loan_id": loan.id, "item_id": item.id})
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _add_context(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Merge the ContextVar context with per-call extras."""
        context = _logging_context.get().copy()
        if extra:
            context.update(extra)
        return context

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.debug(message, extra=self._add_context(extra))

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.info(message, extra=self._add_context(extra))

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.warning(message, extra=self._add_context(extra))

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None, exc_info: bool = False):
        self.logger.error(message, extra=self._add_context(extra), exc_info=exc_info)


@contextmanager
def logging_context(**kwargs):
    """
    Bind context for every StructuredLogger record emitted inside the block.

    Nested blocks add to the enclosing context; the previous context is
    restored on exit.

    Example:
        with logging_context(user_id=42):
            service.borrow_item(42, item_id)
    """
    context = _logging_context.get().copy()
    context.update(kwargs)
    token = _logging_context.set(context)
    try:
        yield context
    finally:
        _logging_context.reset(token)


def get_logging_context() -> Dict[str, Any]:
    return _logging_context.get().copy()


def log_operation(operation_name: str):
    """
    Decorator to log operation start/end with the entity ids it was called with.

    Business rule violations are logged at WARNING, anything else at ERROR
    with a traceback; the exception is always re-raised.

    Example:
        @log_operation("borrow_item")
        def borrow_item(self, user_id, item_id, as_of=None):
            ...
    """
    def decorator(func):
        signature = inspect.signature(func)

        @wraps(func)
        def wrapper(*args, **kwargs):
            logger = StructuredLogger(func.__module__)

            context: Dict[str, Any] = {"operation": operation_name}
            try:
                bound = signature.bind_partial(*args, **kwargs).arguments
            except TypeError:
                bound = kwargs
            for key in _CONTEXT_KEYS:
                if key in bound:
                    context[key] = bound[key]

            # Records from nested calls (e.g. the borrow inside a promotion) carry these too
            with logging_context(**context):
                logger.debug(f"Starting {operation_name}")

                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    failure = {"error": str(e), "error_type": type(e).__name__}
                    if isinstance(e, (BusinessError, ValidationError)):
                        logger.warning(f"Rejected {operation_name}: {e}", extra=failure)
                    else:
                        logger.error(f"Failed {operation_name}", extra=failure, exc_info=True)
                    raise

                logger.info(f"Completed {operation_name}")
                return result

        return wrapper

    return decorator
