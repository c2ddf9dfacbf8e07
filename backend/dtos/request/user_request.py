"""
User request DTOs.
"""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from constants import Role

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class UserRegistrationRequest(BaseModel):
    """Registration payload; the password is hashed before it reaches the store."""

    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(..., min_length=1, max_length=64)
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1)
    role: Role = Role.MEMBER

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not _EMAIL_PATTERN.match(v):
            raise ValueError("Email address is not valid")
        return v.lower()
