"""
Prometheus metrics endpoint for monitoring infrastructure.

This is a PUBLIC endpoint (no authentication required) following
standard Prometheus practices. It exposes metrics collected from
the @measure_operation decorators throughout the application.
"""

from fastapi import APIRouter, Response

from ..monitoring.prometheus_metrics import prometheus_metrics

router = APIRouter(tags=["monitoring"])


@router.get("/metrics", include_in_schema=False)
def get_prometheus_metrics() -> Response:
    """Expose metrics in Prometheus text format."""
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
        headers={"Cache-Control": "no-store"},
    )
