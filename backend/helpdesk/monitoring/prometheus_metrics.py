"""
Prometheus metrics for the presence backend.

Service timings come from the @measure_operation decorator; the presence
module adds counters for catalog cache behaviour and planning outcomes.
"""

from typing import Optional, cast

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

# Custom registry to avoid clashing with default process metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "helpdesk_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "helpdesk_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "helpdesk_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

presence_registry_lookups_total = Counter(
    "helpdesk_presence_registry_lookups_total",
    "Status/office catalog reads by cache outcome",
    ["result"],  # hit | miss
    registry=REGISTRY,
)

presence_days_planned_total = Counter(
    "helpdesk_presence_days_planned_total",
    "Local days replaced by plan_day",
    registry=REGISTRY,
)

presence_validation_failures_total = Counter(
    "helpdesk_presence_validation_failures_total",
    "Plan requests rejected by validation",
    ["kind"],  # schema | business | range
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin facade so callers never touch metric objects directly."""

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
            service: Service name (e.g., 'DayPlanningService')
            operation: Operation name (e.g., 'plan_day')
            duration: Operation duration in seconds
            status: 'success' or 'error'
            error_type: Exception class name if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def record_registry_lookup(hit: bool) -> None:
        presence_registry_lookups_total.labels(result="hit" if hit else "miss").inc()

    @staticmethod
    def record_days_planned(count: int) -> None:
        if count > 0:
            presence_days_planned_total.inc(count)

    @staticmethod
    def record_validation_failure(kind: str) -> None:
        presence_validation_failures_total.labels(kind=kind).inc()

    @staticmethod
    def get_metrics() -> bytes:
        """Metrics in Prometheus text exposition format."""
        return cast(bytes, generate_latest(REGISTRY))

    @staticmethod
    def get_content_type() -> str:
        return cast(str, CONTENT_TYPE_LATEST)


prometheus_metrics = PrometheusMetrics()
