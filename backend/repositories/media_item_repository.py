"""
Media item repository for catalogue and copy-count operations.

Supports the Specification Pattern for catalogue queries.
"""

from typing import List, Optional
from sqlalchemy.orm import Session

from exceptions import DataAccessError
from models import MediaItem as MediaItemModel
from utils.error_handlers import translate_db_errors
from .base_repository import BaseRepository, is_valid_id
from .media_item_specifications import (
    AuthorContainsSpec,
    MediaTypeSpec,
    TitleContainsSpec,
    keyword_spec,
)
from .specifications import Specification


def _blank(text: Optional[str]) -> bool:
    return text is None or text.strip() == ''


class MediaItemRepository(BaseRepository[MediaItemModel]):
    """Repository for MediaItem model operations."""

    def __init__(self, db: Session):
        super().__init__(db, MediaItemModel)

    @translate_db_errors("find media item for update")
    def find_by_id_for_update(self, item_id: Optional[int]) -> Optional[MediaItemModel]:
        """
        Load an item and lock its row until the current transaction ends.

        Backends without row locks (SQLite) ignore FOR UPDATE; the guarded
        copy decrement still prevents over-lending there.
        """
        if not is_valid_id(item_id):
            return None
        return self.db.query(self.model).filter(
            self.model.id == item_id
        ).with_for_update().populate_existing().first()

    @translate_db_errors("find media item by isbn")
    def find_by_isbn(self, isbn: Optional[str]) -> Optional[MediaItemModel]:
        if _blank(isbn):
            return None
        return self.db.query(self.model).filter(self.model.isbn == isbn.strip()).first()

    @translate_db_errors("check isbn exists")
    def exists_by_isbn(self, isbn: Optional[str]) -> bool:
        if _blank(isbn):
            return False
        return self.db.query(self.model.id).filter(self.model.isbn == isbn.strip()).first() is not None

    def find_by_type(self, media_type: Optional[str]) -> List[MediaItemModel]:
        """
        Get all items carrying a type tag.

        Args:
            media_type: Type tag (BOOK, CD, ...); blank returns nothing
        """
        if _blank(media_type):
            return []
        return self.find_matching(MediaTypeSpec(media_type))

    def find_by_title_containing(self, text: Optional[str]) -> List[MediaItemModel]:
        if _blank(text):
            return []
        return self.find_matching(TitleContainsSpec(text.strip()))

    def find_by_author_containing(self, text: Optional[str]) -> List[MediaItemModel]:
        if _blank(text):
            return []
        return self.find_matching(AuthorContainsSpec(text.strip()))

    def search(self, keyword: Optional[str]) -> List[MediaItemModel]:
        """
        Keyword search across title, author, ISBN and publisher.

        Args:
            keyword: Search text; None or blank returns an empty list

        Returns:
            Matching items ordered by title
        """
        if _blank(keyword):
            return []
        return self.find_matching(keyword_spec(keyword.strip()))

    @translate_db_errors("search media items")
    def find_matching(self, spec: Specification[MediaItemModel]) -> List[MediaItemModel]:
        """
        Find items using a specification.

        Example:
            spec = TitleContainsSpec("python") & HasAvailableCopySpec()
            items = repo.find_matching(spec)
        """
        return self.db.query(self.model).filter(
            spec.to_sql_filter()
        ).order_by(self.model.title, self.model.id).all()

    @translate_db_errors("update available copies")
    def update_available_copies(self, item_id: Optional[int], value: int, relative: bool = False) -> int:
        """
        Set (or adjust) an item's available copy count.

        Negative results are accepted; they mark over-committed copies.

        Args:
            item_id: Item to update
            value: New count, or the delta when relative=True
            relative: Treat value as a delta

        Returns:
            The new available copy count

        Raises:
            DataAccessError: If the item does not exist
        """
        if not is_valid_id(item_id):
            raise DataAccessError("update available copies", f"MediaItem {item_id} does not exist")

        new_value = self.model.available_copies + value if relative else value
        updated = self.db.query(self.model).filter(
            self.model.id == item_id
        ).update({self.model.available_copies: new_value}, synchronize_session='fetch')

        if updated == 0:
            raise DataAccessError("update available copies", f"MediaItem {item_id} does not exist")

        return self.db.query(self.model.available_copies).filter(self.model.id == item_id).scalar()

    @translate_db_errors("take copy")
    def decrement_if_available(self, item_id: int) -> bool:
        """
        Take one copy off the shelf if any is available.

        The check and the decrement are a single conditional UPDATE, so two
        concurrent borrowers cannot both take the last copy.

        Returns:
            True if a copy was taken, False if none was available
        """
        updated = self.db.query(self.model).filter(
            self.model.id == item_id,
            self.model.available_copies > 0
        ).update(
            {self.model.available_copies: self.model.available_copies - 1},
            synchronize_session='fetch'
        )
        return updated == 1
