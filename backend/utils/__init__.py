"""
Utility functions and decorators.
"""

from .error_handlers import translate_db_errors
from .logging_utils import StructuredLogger, configure_logging, log_operation, logging_context

__all__ = ["translate_db_errors", "StructuredLogger", "configure_logging", "log_operation", "logging_context"]
