"""
Request DTOs

Validated input for mutating service operations. Pydantic errors raised
while building these are translated into ValidationError by the services.
"""

from .media_item_request import MediaItemRequest
from .user_request import UserRegistrationRequest

__all__ = ["MediaItemRequest", "UserRegistrationRequest"]
