"""CloudWatch Embedded Metric Format (EMF) metrics helper.

EMF allows embedding metrics directly in log lines, which CloudWatch
extracts into metrics. Every emitter here is a no-op when
``settings.enable_metrics`` is off.
"""

from __future__ import annotations

import json
import logging
import re
import time
from typing import Any

from church_registry.core.config import settings

logger = logging.getLogger(__name__)

_UUID_SEGMENT = re.compile(
    r"/[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)
_NUMERIC_SEGMENT = re.compile(r"/\d+")


class EMFMetrics:
    """Helper class to emit metrics in EMF format."""

    def __init__(self, namespace: str | None = None):
        if namespace:
            self.namespace = namespace
        elif settings.metrics_namespace:
            self.namespace = settings.metrics_namespace
        else:
            self.namespace = settings.service_name.replace(" ", "/")

    def emit_metric(
        self,
        metric_name: str,
        value: float,
        unit: str,
        dimensions: dict[str, str] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Emit a single metric."""
        self.emit_metrics(
            metrics=[{"MetricName": metric_name, "Value": value, "Unit": unit}],
            dimensions=dimensions,
            metadata=metadata,
        )

    def emit_metrics(
        self,
        metrics: list[dict[str, Any]],
        dimensions: dict[str, str] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Emit several metrics in a single EMF log entry.

        Args:
            metrics: List of dicts with keys MetricName, Value, Unit
            dimensions: Optional dimensions shared by all metrics
            metadata: Optional extra top-level fields
        """
        # Checked on every call so tests can toggle it at runtime
        if not settings.enable_metrics:
            return

        emf_log = self.build_emf_log(
            metrics=[
                {"MetricName": m["MetricName"], "Unit": m["Unit"]} for m in metrics
            ],
            dimensions=dimensions,
            metadata=metadata,
        )
        for metric in metrics:
            emf_log[metric["MetricName"]] = metric["Value"]

        logger.info(json.dumps(emf_log, default=str))

    def build_emf_log(
        self,
        metrics: list[dict[str, str]],
        dimensions: dict[str, str] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        emf_log: dict[str, Any] = {
            "_aws": {
                "CloudWatchMetrics": [
                    {
                        "Namespace": self.namespace,
                        "Metrics": metrics,
                        "Dimensions": (
                            [[dim] for dim in dimensions.keys()] if dimensions else []
                        ),
                    }
                ],
                "Timestamp": int(time.time() * 1000),
            }
        }
        if dimensions:
            emf_log.update(dimensions)
        if metadata:
            emf_log.update(metadata)
        return emf_log


_emf_metrics: EMFMetrics | None = None


def get_metrics() -> EMFMetrics:
    """Get or create the global EMF metrics instance."""
    global _emf_metrics
    if _emf_metrics is None:
        _emf_metrics = EMFMetrics()
    return _emf_metrics


def emit_http_request(
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    **metadata: Any,
) -> None:
    """Emit request count and latency for one HTTP request."""
    get_metrics().emit_metrics(
        metrics=[
            {"MetricName": "RequestCount", "Value": 1, "Unit": "Count"},
            {
                "MetricName": "RequestDuration",
                "Value": duration_ms,
                "Unit": "Milliseconds",
            },
        ],
        dimensions={
            "Method": method,
            "Path": normalize_path(path),
            "StatusCode": str(status_code),
        },
        metadata={"request_path": path, **metadata},
    )


def emit_error(
    error_code: str,
    status_code: int,
    path: str,
    method: str,
    **metadata: Any,
) -> None:
    """Emit an error count classified by severity."""
    if status_code >= 500:
        severity = "server_error"
    elif status_code >= 400:
        severity = "client_error"
    else:
        severity = "unknown"

    get_metrics().emit_metrics(
        metrics=[{"MetricName": "ErrorCount", "Value": 1, "Unit": "Count"}],
        dimensions={
            "ErrorCode": error_code,
            "StatusCode": str(status_code),
            "Severity": severity,
            "Method": method,
            "Path": normalize_path(path),
        },
        metadata={"request_path": path, **metadata},
    )


def emit_record_event(
    entity_type: str,
    action: str,
    **metadata: Any,
) -> None:
    """Emit a business event such as ``death_record`` / ``created``."""
    get_metrics().emit_metric(
        metric_name="RecordEvent",
        value=1,
        unit="Count",
        dimensions={"EntityType": entity_type, "Action": action},
        metadata=metadata,
    )


def normalize_path(path: str) -> str:
    """Replace UUID and numeric path segments with ``{id}``."""
    path = _UUID_SEGMENT.sub("/{id}", path)
    return _NUMERIC_SEGMENT.sub("/{id}", path)
