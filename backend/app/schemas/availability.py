# backend/app/schemas/availability.py
"""
Availability schemas for the Scheduler API.

Intervals travel as ``[start, end]`` pairs of ISO-8601 datetimes. Arity and
15-minute alignment are checked by the service layer so the API reports
them with the same error codes as every other caller.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ..services.availability_service import UserAvailability
from .base import StandardizedModel, StrictRequestModel

IntervalPair = List[datetime]


class Availability(StandardizedModel):
    """A user's availability as merged ranges."""

    user_id: str = Field(..., min_length=1)
    available_time_intervals: List[IntervalPair] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: UserAvailability) -> "Availability":
        return cls(
            user_id=result.user_id,
            available_time_intervals=[[item.start, item.end] for item in result.intervals],
        )


class AvailabilityCreate(StrictRequestModel):
    """Ranges to add to a user's availability."""

    user_id: str = Field(..., min_length=1)
    available_time_intervals: List[IntervalPair]


class AvailabilityChanges(StrictRequestModel):
    """Incremental edit; removals are applied before additions."""

    add: Optional[List[IntervalPair]] = None
    remove: Optional[List[IntervalPair]] = None


class AvailabilityUpdate(StrictRequestModel):
    """Body of an incremental availability edit."""

    user_id: str = Field(..., min_length=1)
    changes: AvailabilityChanges


class BatchAvailabilityRequest(StrictRequestModel):
    """Users whose availability should be returned, in order."""

    user_ids: List[str]
