# backend/app/repositories/base_repository.py
"""
Base Repository Pattern for the Scheduler API

Provides the foundation for all repository classes with:
- Common read/delete operations
- Type safety with generics
- Transaction support (managed by services)

The repository pattern separates data access from business logic,
making the code more testable and maintainable.
"""

import logging
from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException

# Type variable for generic model support
T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """
    Concrete base repository implementation with common data access patterns.

    Attributes:
        db: SQLAlchemy session
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize repository with database session and model.

        Args:
            db: SQLAlchemy session (managed by service layer)
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @property
    def dialect_name(self) -> str:
        """Name of the dialect the session is bound to (postgresql, sqlite)."""
        return self.db.get_bind().dialect.name

    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an entity by its primary key."""
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting {self.model.__name__} by id {id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve {self.model.__name__}: {str(e)}")

    def delete(self, id: str) -> bool:
        """
        Delete an entity by its primary key.

        Returns False if entity not found.
        """
        try:
            entity = self.get_by_id(id)
            if not entity:
                return False

            self.db.delete(entity)
            self.db.flush()
            return True
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting {self.model.__name__} {id}: {str(e)}")
            raise RepositoryException(f"Failed to delete {self.model.__name__}: {str(e)}")

    def count(self, **kwargs: Any) -> int:
        """Count entities matching given criteria."""
        try:
            return self.db.query(self.model).filter_by(**kwargs).count()
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting records: {str(e)}")
            raise RepositoryException(f"Failed to count records: {str(e)}")
