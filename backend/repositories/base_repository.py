"""
Base repository providing common CRUD operations.
"""

from typing import Generic, TypeVar, List, Optional, Type, Any
from sqlalchemy.orm import Session

from exceptions import DataAccessError
from utils.error_handlers import translate_db_errors

T = TypeVar('T')


def is_valid_id(value: Any) -> bool:
    """Surrogate keys are positive integers; anything else cannot match a row."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class BaseRepository(Generic[T]):
    """
    Generic base repository providing common CRUD operations.
    All specific repositories should inherit from this class.

    Lookups never raise for absent or invalid keys; they return None, an
    empty list or False. Writes flush immediately so constraint violations
    surface as DataAccessError at the call site.
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize the repository.

        Args:
            db: SQLAlchemy database session
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    @translate_db_errors("find by id")
    def find_by_id(self, id: Optional[int]) -> Optional[T]:
        """
        Retrieve a record by its ID.

        Args:
            id: Primary key value

        Returns:
            Model instance or None if not found
        """
        if not is_valid_id(id):
            return None
        return self.db.query(self.model).filter(self.model.id == id).first()

    @translate_db_errors("find all")
    def find_all(self, limit: Optional[int] = None, offset: int = 0) -> List[T]:
        """
        Retrieve all records, oldest id first.

        Args:
            limit: Maximum number of records to return
            offset: Number of records to skip
        """
        query = self.db.query(self.model).order_by(self.model.id)
        if limit:
            query = query.limit(limit)
        if offset:
            query = query.offset(offset)
        return query.all()

    @translate_db_errors("save")
    def save(self, obj: T) -> T:
        """
        Insert a new record; the store assigns its id.

        Returns:
            Saved model instance with id populated
        """
        self.db.add(obj)
        self.db.flush()
        return obj

    @translate_db_errors("update")
    def update(self, obj: T) -> T:
        """
        Persist changes to an existing record.

        Raises:
            DataAccessError: If the record has no id or no longer exists
        """
        obj_id = getattr(obj, 'id', None)
        if not is_valid_id(obj_id) or not self.exists(obj_id):
            raise DataAccessError("update", f"{self.entity_name} {obj_id} does not exist")
        merged = self.db.merge(obj)
        self.db.flush()
        return merged

    @translate_db_errors("delete")
    def delete_by_id(self, id: Optional[int]) -> bool:
        """
        Delete a record by its ID.

        Returns:
            True if deleted, False if not found
        """
        obj = self.find_by_id(id)
        if obj is None:
            return False
        self.db.delete(obj)
        self.db.flush()
        return True

    @translate_db_errors("count")
    def count(self) -> int:
        return self.db.query(self.model).count()

    @translate_db_errors("exists")
    def exists(self, id: Optional[int]) -> bool:
        """
        Check if a record exists by ID.
        """
        if not is_valid_id(id):
            return False
        return self.db.query(self.model.id).filter(self.model.id == id).first() is not None
