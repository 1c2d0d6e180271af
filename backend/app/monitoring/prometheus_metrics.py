"""
Prometheus metrics module for the Scheduler API.

Service timings are fed by the @measure_operation decorator; request
timings by ``PrometheusMiddleware`` in
``app.middleware.prometheus_middleware``.
"""

from typing import Optional, cast

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Custom registry so repeated app construction in tests never double-registers
REGISTRY = CollectorRegistry()

http_request_duration_seconds = Histogram(
    "scheduler_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status_code"],
    registry=REGISTRY,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

http_requests_total = Counter(
    "scheduler_http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"],
    registry=REGISTRY,
)

service_operation_duration_seconds = Histogram(
    "scheduler_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "scheduler_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "scheduler_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

availability_blocks_written_total = Counter(
    "scheduler_availability_blocks_written_total",
    "Availability blocks written to storage",
    ["operation"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Manages Prometheus metrics collection and exposure."""

    @staticmethod
    def record_http_request(method: str, endpoint: str, duration: float, status_code: int) -> None:
        """Record HTTP request metrics."""
        labels = {"method": method, "endpoint": endpoint, "status_code": str(status_code)}

        http_request_duration_seconds.labels(**labels).observe(duration)
        http_requests_total.labels(**labels).inc()

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'AvailabilityService')
            operation: Operation/method name (e.g., 'create_availability')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()

        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def inc_blocks_written(operation: str, count: int) -> None:
        """Count availability blocks persisted by ``operation``."""
        if count > 0:
            availability_blocks_written_total.labels(operation=operation).inc(count)

    @staticmethod
    def get_metrics() -> bytes:
        """
        Generate Prometheus metrics in exposition format.

        Returns:
            Metrics data in Prometheus text format
        """
        return cast(bytes, generate_latest(REGISTRY))

    @staticmethod
    def get_content_type() -> str:
        """Get the content type for Prometheus metrics."""
        return cast(str, CONTENT_TYPE_LATEST)


# Singleton instance
prometheus_metrics = PrometheusMetrics()
