# backend/app/repositories/factory.py
"""
Repository Factory for the Scheduler API

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from .base_repository import BaseRepository

# Avoid circular imports
if TYPE_CHECKING:
    from ..models.user import User
    from .availability_repository import AvailabilityRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_availability_repository(db: Session) -> "AvailabilityRepository":
        """Create repository for availability block operations."""
        from .availability_repository import AvailabilityRepository

        return AvailabilityRepository(db)

    @staticmethod
    def create_user_repository(db: Session) -> "BaseRepository[User]":
        """Create a generic repository for user lookups."""
        from ..models.user import User

        return BaseRepository(db, User)
