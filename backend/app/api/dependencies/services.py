# backend/app/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.availability_service import AvailabilityService
from .database import get_db


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """
    Get availability service instance.

    Args:
        db: Database session

    Returns:
        AvailabilityService instance
    """
    return AvailabilityService(db)
