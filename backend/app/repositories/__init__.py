# backend/app/repositories/__init__.py
"""
Repository Pattern Implementation for the Scheduler API

This package provides the repository layer for data access,
separating business logic from database queries.

Key Components:
- BaseRepository: Foundation for all repositories with generic lookups
- AvailabilityRepository: Canonical 15-minute block storage
- RepositoryFactory: Factory for creating repository instances

Usage:
    from app.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_availability_repository(db)
    blocks = repository.select_blocks(user_id)
"""

from .availability_repository import AvailabilityRepository
from .base_repository import BaseRepository
from .factory import RepositoryFactory

__all__ = [
    "AvailabilityRepository",
    "BaseRepository",
    "RepositoryFactory",
]
