# backend/app/api/dependencies/auth.py
"""
Authentication dependencies.

Token verification happens upstream; by the time a route runs the caller
has been resolved onto ``request.state.current_user``.
"""

import logging

from fastapi import Request

from ...core.exceptions import UnauthorizedException
from ...principal import CurrentUser

logger = logging.getLogger(__name__)


def get_current_user(request: Request) -> CurrentUser:
    """
    Get the authenticated caller for this request.

    Raises:
        HTTPException: 401 if no caller was attached upstream
    """
    current_user = getattr(request.state, "current_user", None)
    if not isinstance(current_user, CurrentUser):
        logger.info("Request without authenticated user: %s", request.url.path)
        raise UnauthorizedException(
            "Authentication required", code="UNAUTHENTICATED"
        ).to_http_exception()
    return current_user
