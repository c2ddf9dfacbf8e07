"""
Media item Specifications

Concrete specifications for catalogue queries. Text matching is
case-insensitive substring matching; LIKE wildcards in the search text are
escaped so that "%" or "_" match literally.
"""

from typing import Optional

from sqlalchemy import func

from models import MediaItem
from .specifications import Specification

_LIKE_ESCAPE = '\\'


def _escape_like(text: str) -> str:
    return (
        text.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace('%', _LIKE_ESCAPE + '%')
        .replace('_', _LIKE_ESCAPE + '_')
    )


class _ColumnContainsSpec(Specification[MediaItem]):
    """Case-insensitive substring match on a single text column."""

    attribute: str = ''

    def __init__(self, text: str):
        self.text = text

    def is_satisfied_by(self, item: MediaItem) -> bool:
        value: Optional[str] = getattr(item, self.attribute)
        return value is not None and self.text.lower() in value.lower()

    def to_sql_filter(self):
        column = getattr(MediaItem, self.attribute)
        return column.ilike(f"%{_escape_like(self.text)}%", escape=_LIKE_ESCAPE)


class TitleContainsSpec(_ColumnContainsSpec):
    attribute = 'title'


class AuthorContainsSpec(_ColumnContainsSpec):
    attribute = 'author'


class IsbnContainsSpec(_ColumnContainsSpec):
    attribute = 'isbn'


class PublisherContainsSpec(_ColumnContainsSpec):
    attribute = 'publisher'


class MediaTypeSpec(Specification[MediaItem]):
    """Items carrying a given type tag (compared case-insensitively)."""

    def __init__(self, media_type: str):
        self.media_type = media_type.strip().upper()

    def is_satisfied_by(self, item: MediaItem) -> bool:
        return (item.media_type or '').upper() == self.media_type

    def to_sql_filter(self):
        return func.upper(MediaItem.media_type) == self.media_type


class HasAvailableCopySpec(Specification[MediaItem]):
    """Items with at least one copy on the shelf."""

    def is_satisfied_by(self, item: MediaItem) -> bool:
        return item.has_available_copy

    def to_sql_filter(self):
        return MediaItem.available_copies > 0


def keyword_spec(keyword: str) -> Specification[MediaItem]:
    """Match a keyword against title, author, ISBN or publisher."""
    return (
        TitleContainsSpec(keyword)
        | AuthorContainsSpec(keyword)
        | IsbnContainsSpec(keyword)
        | PublisherContainsSpec(keyword)
    )
