"""
Health check endpoints for the application.

Used by load balancers and uptime checks to confirm the service and its
database are reachable.
"""

from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..api.dependencies.database import get_db
from ..core.config import settings
from ..core.constants import API_VERSION

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


class HealthCheckResponse(BaseModel):
    status: str
    service: str
    version: str
    environment: str
    timestamp: datetime
    database: bool


@router.get("/health", response_model=HealthCheckResponse)
def health_check(response: Response, db: Session = Depends(get_db)) -> HealthCheckResponse:
    """
    Basic health check endpoint.

    Returns:
        "healthy" when the database answers, "degraded" otherwise.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = True
        status = "healthy"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        db_status = False
        status = "degraded"

    response.headers["Cache-Control"] = "no-store"
    return HealthCheckResponse(
        status=status,
        service="scheduler-api",
        version=API_VERSION,
        environment=settings.environment,
        timestamp=datetime.now(timezone.utc),
        database=db_status,
    )
