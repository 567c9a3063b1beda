"""
Prometheus metrics module for the tutoring platform.

Service operations are recorded by the @measure_operation decorator; the
contract mutex records its own outcomes. Everything lives on a custom
registry exposed at /metrics/prometheus.
"""

from typing import Optional

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "tutorbook_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "tutorbook_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "tutorbook_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

contract_lock_events_total = Counter(
    "tutorbook_contract_lock_events_total",
    "Contract mutex acquire/release outcomes",
    ["action", "outcome"],
    registry=REGISTRY,
)

reschedule_decisions_total = Counter(
    "tutorbook_reschedule_decisions_total",
    "Reschedule requests created, approved or rejected",
    ["decision"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin facade over the module-level collectors."""

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
            service: Service name (e.g., 'RescheduleService')
            operation: Operation/method name (e.g., 'approve_request')
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
    def record_contract_lock(action: str, outcome: str) -> None:
        contract_lock_events_total.labels(action=action, outcome=outcome).inc()

    @staticmethod
    def record_reschedule_decision(decision: str) -> None:
        reschedule_decisions_total.labels(decision=decision).inc()

    @staticmethod
    def get_metrics() -> bytes:
        return generate_latest(REGISTRY)

    @staticmethod
    def get_content_type() -> str:
        return CONTENT_TYPE_LATEST


prometheus_metrics = PrometheusMetrics()
