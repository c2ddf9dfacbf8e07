"""
Custom exception classes for the application.

This module defines domain-specific exceptions that separate caller mistakes,
lending rule violations and storage failures.
"""

from constants import BusinessErrorCode


class ApplicationError(Exception):
    """Base exception for all application errors"""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(ApplicationError):
    """Raised when there's a configuration issue"""

    def __init__(self, message: str, missing_keys: list[str] | None = None):
        details = {"missing_keys": missing_keys} if missing_keys else {}
        super().__init__(message, details)


class ValidationError(ApplicationError):
    """Raised when input to a mutating operation is malformed"""

    def __init__(self, message: str, invalid_fields: dict | None = None):
        details = {"invalid_fields": invalid_fields} if invalid_fields else {}
        super().__init__(message, details)


class BusinessError(ApplicationError):
    """Raised when a lending rule is violated"""

    def __init__(self, code: BusinessErrorCode, message: str | None = None, **details):
        self.code = code
        msg = message or BusinessErrorCode.get_message(code)
        super().__init__(msg, {"code": code.value, **details})


class DataAccessError(ApplicationError):
    """Raised when storage operations fail"""

    def __init__(self, operation: str, message: str):
        details = {"operation": operation}
        super().__init__(message, details)


class AuthenticationError(ApplicationError):
    """Raised when login or registration is rejected"""

    def __init__(self, message: str, username: str | None = None):
        details = {"username": username} if username else {}
        super().__init__(message, details)
