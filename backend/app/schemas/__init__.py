# backend/app/schemas/__init__.py
"""
Pydantic schemas for the Scheduler API.
"""

from .availability import (
    Availability,
    AvailabilityChanges,
    AvailabilityCreate,
    AvailabilityUpdate,
    BatchAvailabilityRequest,
)
from .base import StandardizedModel, StrictRequestModel

__all__ = [
    "Availability",
    "AvailabilityChanges",
    "AvailabilityCreate",
    "AvailabilityUpdate",
    "BatchAvailabilityRequest",
    "StandardizedModel",
    "StrictRequestModel",
]
