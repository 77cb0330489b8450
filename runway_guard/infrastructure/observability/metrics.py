"""Prometheus metrics for monitoring alert volume, evaluation health, and notification delivery"""

from typing import Iterable
from prometheus_client import Counter, Histogram

# Alert metrics
alert_counter = Counter(
    "runway_guard_alerts_total",
    "Threshold alerts generated",
    ["type", "severity"],
)

evaluation_failure_counter = Counter(
    "threshold_evaluation_failures_total",
    "Threshold evaluations that failed and returned partial results",
)

# Notification metrics
notification_delivery_counter = Counter(
    "notification_delivery_total",
    "Notification dispatch attempts",
    ["channel", "outcome"],  # success | failure
)

notification_latency_histogram = Histogram(
    "notification_latency_seconds",
    "Per-channel notification dispatch time",
    ["channel"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_alerts(alerts: Iterable) -> None:
    """Count generated alerts by type and severity"""
    for alert in alerts:
        alert_counter.labels(type=alert.type.value, severity=alert.severity.value).inc()


def record_delivery(channel: str, success: bool, duration_seconds: float) -> None:
    """Record one channel dispatch outcome"""
    outcome = "success" if success else "failure"
    notification_delivery_counter.labels(channel=channel, outcome=outcome).inc()
    notification_latency_histogram.labels(channel=channel).observe(duration_seconds)
