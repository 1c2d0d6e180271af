# backend/app/routes/v1/availability.py
"""
Availability routes - API v1

Thin HTTP layer over AvailabilityService: maps JSON bodies onto service
calls and domain errors onto status codes.

Endpoints:
    POST /users/{user_id}/availability   Add ranges (201, echoes input)
    GET /users/{user_id}/availability    Merged ranges for one user
    PATCH /users/{user_id}/availability  Incremental add/remove edit
    POST /availability/batch             Merged ranges for several users
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_availability_service
from ...core.exceptions import DomainException, ValidationException
from ...principal import CurrentUser
from ...schemas.availability import (
    Availability,
    AvailabilityCreate,
    AvailabilityUpdate,
    BatchAvailabilityRequest,
)
from ...services.availability_service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["availability"])


def _ensure_matching_user(path_user_id: str, body_user_id: str) -> None:
    if path_user_id != body_user_id:
        raise ValidationException(
            "User ID in body does not match the URL",
            code="USER_ID_MISMATCH",
            details={"path_user_id": path_user_id, "body_user_id": body_user_id},
        )


@router.post(
    "/users/{user_id}/availability",
    response_model=Availability,
    status_code=status.HTTP_201_CREATED,
)
def create_availability(
    user_id: str,
    payload: AvailabilityCreate,
    current_user: CurrentUser = Depends(get_current_user),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> Availability:
    """Add availability ranges for a user."""
    try:
        _ensure_matching_user(user_id, payload.user_id)
        result = availability_service.create_availability(
            user_id, payload.available_time_intervals, actor=current_user
        )
        return Availability.from_result(result)
    except DomainException as e:
        raise e.to_http_exception()


@router.get("/users/{user_id}/availability", response_model=Availability)
def get_availability(
    user_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> Availability:
    """Get a user's availability as merged ranges."""
    try:
        result = availability_service.get_availability(user_id, actor=current_user)
        return Availability.from_result(result)
    except DomainException as e:
        raise e.to_http_exception()


@router.patch("/users/{user_id}/availability", response_model=Availability)
def update_availability(
    user_id: str,
    payload: AvailabilityUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> Availability:
    """Apply removals then additions to a user's availability."""
    try:
        _ensure_matching_user(user_id, payload.user_id)
        result = availability_service.update_availability(
            user_id,
            add=payload.changes.add,
            remove=payload.changes.remove,
            actor=current_user,
        )
        return Availability.from_result(result)
    except DomainException as e:
        raise e.to_http_exception()


@router.post("/availability/batch", response_model=List[Availability])
def get_batch_availability(
    payload: BatchAvailabilityRequest,
    current_user: CurrentUser = Depends(get_current_user),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> List[Availability]:
    """Get availability for several users in the order requested."""
    try:
        results = availability_service.get_batch_availability(
            payload.user_ids, actor=current_user
        )
        return [Availability.from_result(result) for result in results]
    except DomainException as e:
        raise e.to_http_exception()
