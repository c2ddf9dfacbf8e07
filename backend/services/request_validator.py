"""
Request Validator Service

Validation helpers shared by the lending services: building request DTOs
from entities or payloads and normalizing reference dates.
"""
from datetime import date, datetime
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from exceptions import ValidationError
import logging

logger = logging.getLogger(__name__)

RequestT = TypeVar('RequestT', bound=BaseModel)


class RequestValidator:
    """Validator for service inputs"""

    @staticmethod
    def validate(request_cls: Type[RequestT], payload: Any, what: str) -> RequestT:
        """
        Build a request DTO from an entity, mapping or existing DTO.

        Args:
            request_cls: Pydantic model to validate against
            payload: ORM entity, dict or request instance
            what: Human-readable subject for error messages

        Returns:
            Validated request instance

        Raises:
            ValidationError: If payload is None or fails validation
        """
        if payload is None:
            raise ValidationError(f"{what} is required")

        if isinstance(payload, request_cls):
            return payload

        try:
            if isinstance(payload, dict):
                return request_cls.model_validate(payload)
            return request_cls.model_validate(payload, from_attributes=True)
        except PydanticValidationError as e:
            invalid_fields = {
                ".".join(str(part) for part in err["loc"]) or "__root__": err["msg"]
                for err in e.errors()
            }
            logger.debug(f"{what} rejected: {invalid_fields}")
            raise ValidationError(
                f"Invalid {what.lower()}: {', '.join(sorted(invalid_fields))}",
                invalid_fields=invalid_fields
            ) from e

    @staticmethod
    def as_date(value: Optional[date]) -> date:
        """Reference date for loan arithmetic; defaults to today."""
        if value is None:
            return date.today()
        if isinstance(value, datetime):
            return value.date()
        return value

    @staticmethod
    def as_datetime(value: Optional[datetime]) -> datetime:
        """Reference timestamp for reservation arithmetic; defaults to now (UTC, naive)."""
        if value is None:
            return datetime.utcnow()
        if isinstance(value, datetime):
            return value
        return datetime.combine(value, datetime.min.time())
