"""
Error translation decorators for the data access layer.

Repository methods are wrapped with translate_db_errors so that no
SQLAlchemy exception escapes the repositories; callers only ever see
DataAccessError (or the application errors a method raises itself).
"""

from functools import wraps
from typing import Callable
import logging

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from exceptions import ApplicationError, DataAccessError

logger = logging.getLogger(__name__)


def translate_db_errors(operation_name: str):
    """
    Decorator to convert storage exceptions into DataAccessError.

    The failed session is rolled back so the caller can keep using it; the
    message names the operation and failure kind without leaking SQL or
    driver details.

    Args:
        operation_name: Human-readable name of the operation (e.g., "save media item")

    Example:
        @translate_db_errors("save media item")
        def save(self, item):
            ...
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                return func(self, *args, **kwargs)
            except ApplicationError:
                raise
            except IntegrityError as e:
                logger.warning(f"{operation_name} - Constraint violation: {e.orig}")
                _rollback_quietly(self)
                raise DataAccessError(operation_name, f"{operation_name} failed: constraint violation") from e
            except OperationalError as e:
                logger.error(f"{operation_name} - Store unavailable: {e.orig}", exc_info=True)
                _rollback_quietly(self)
                raise DataAccessError(operation_name, f"{operation_name} failed: store unavailable") from e
            except SQLAlchemyError as e:
                logger.error(f"{operation_name} - Database error: {e}", exc_info=True)
                _rollback_quietly(self)
                raise DataAccessError(operation_name, f"{operation_name} failed") from e

        return wrapper

    return decorator


def _rollback_quietly(repository) -> None:
    """Roll back the repository's session after a failed statement."""
    db = getattr(repository, 'db', None)
    if db is None:
        return
    try:
        db.rollback()
    except SQLAlchemyError as e:
        logger.error(f"Rollback after failure also failed: {e}")
