"""
Request Metrics Collector

Translates the per-request measurements recorded by an instrumented cloud
SDK client into tagged counters and timers on a metrics registry.
"""

from .collector import (
    RequestMetricCollector, NoopRequestMetricCollector, NONE,
    RequestMetricsCollector, RequestMetricsExtractor, first_value, is_error
)
from .config import CollectorConfig
from .errors import RequestMetricsError, ConfigurationError
from .fields import UNKNOWN, Field, TagField, TIMERS, COUNTERS, TAGS, ERRORS
from .naming import DEFAULT_PREFIX, decapitalize, id_name
from .request import Request
from .timing import MeasurementBag, RequestMetrics, TimingInfo, TimingInterval

# Registry
from .monitoring import (
    MetricsRegistry, Registry, Counter, Timer,
    Metric, MetricId, MetricType, get_registry
)

__version__ = "1.0.0"
__all__ = [
    "RequestMetricCollector",
    "NoopRequestMetricCollector",
    "NONE",
    "RequestMetricsCollector",
    "RequestMetricsExtractor",
    "first_value",
    "is_error",
    "CollectorConfig",
    "RequestMetricsError",
    "ConfigurationError",
    "UNKNOWN",
    "Field",
    "TagField",
    "TIMERS",
    "COUNTERS",
    "TAGS",
    "ERRORS",
    "DEFAULT_PREFIX",
    "decapitalize",
    "id_name",
    "Request",
    "MeasurementBag",
    "RequestMetrics",
    "TimingInfo",
    "TimingInterval",
    "MetricsRegistry",
    "Registry",
    "Counter",
    "Timer",
    "Metric",
    "MetricId",
    "MetricType",
    "get_registry"
]
