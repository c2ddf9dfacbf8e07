"""
Media item request DTOs.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MediaItemRequest(BaseModel):
    """
    Validated shape of a media item about to be added or updated.

    available_copies is deliberately unconstrained: a negative count is a
    legitimate over-commitment signal, not an input error.
    """

    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    id: Optional[int] = Field(None, description="Item id (required for updates)")
    title: str = Field(..., min_length=1, description="Title")
    author: Optional[str] = Field(None, description="Author or artist")
    media_type: str = Field(..., min_length=1, description="Free-form type tag, e.g. BOOK or CD")
    isbn: Optional[str] = Field(None, description="ISBN (books only, unique when set)")
    publication_date: Optional[date] = None
    publisher: Optional[str] = None
    total_copies: int = Field(1, ge=0, description="Copies owned")
    available_copies: Optional[int] = Field(None, description="Copies on the shelf")
    late_fees_per_day: Decimal = Field(Decimal('0.00'), ge=0, decimal_places=2)

    @field_validator("media_type")
    @classmethod
    def normalize_media_type(cls, v: str) -> str:
        """Type tags are stored upper-case."""
        return v.upper()

    @field_validator("isbn")
    @classmethod
    def blank_isbn_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @field_validator("total_copies", "available_copies", mode="before")
    @classmethod
    def reject_boolean_counts(cls, v, info):
        if isinstance(v, bool):
            raise ValueError("Copy counts must be integers")
        # Unflushed entities carry None until column defaults apply
        if v is None and info.field_name == "total_copies":
            return 1
        return v

    @field_validator("late_fees_per_day", mode="before")
    @classmethod
    def default_late_fee(cls, v):
        return Decimal('0.00') if v is None else v
