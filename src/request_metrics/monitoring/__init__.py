"""
Metrics registry components for request metrics.

Provides metric identifiers, the registry collaborator interface and an
in-memory registry implementation.
"""

from .metrics import (
    MetricsRegistry, Registry, Counter, Timer,
    Metric, MetricId, MetricType, get_registry
)

__all__ = [
    "MetricsRegistry",
    "Registry",
    "Counter",
    "Timer",
    "Metric",
    "MetricId",
    "MetricType",
    "get_registry"
]
