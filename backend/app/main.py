# backend/app/main.py
"""
Scheduler API application entrypoint.

Run with ``uvicorn app.main:app`` from the backend directory.
"""

import logging

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.constants import API_DESCRIPTION, API_PREFIX, API_TITLE, API_VERSION
from .core.logging import setup_logging
from .errors import register_error_handlers
from .middleware.prometheus_middleware import PrometheusMiddleware
from .routes import health, prometheus
from .routes.v1 import availability as availability_v1

# Configure logging
setup_logging()

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build the FastAPI application with middleware, routers and error handlers."""
    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None,
    )

    allowed_origins = list(settings.cors_allowed_origins)
    assert "*" not in allowed_origins, "CORS allow_origins cannot include * when allow_credentials=True"
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PATCH"],
        allow_headers=["*"],
    )
    logger.info("CORS allow_origins=%s allow_credentials=%s", allowed_origins, True)

    app.add_middleware(PrometheusMiddleware)

    # Create API v1 router
    api_v1 = APIRouter(prefix=API_PREFIX)
    api_v1.include_router(availability_v1.router)
    app.include_router(api_v1)

    # Infrastructure routes (unversioned)
    app.include_router(health.router)
    app.include_router(prometheus.router)

    register_error_handlers(app)

    logger.info(
        "%s %s started (environment=%s)", API_TITLE, API_VERSION, settings.environment
    )
    return app


app = create_app()
