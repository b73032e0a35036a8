"""
Request metric collectors.

``RequestMetricsCollector`` turns the measurement bag of a completed SDK
request into counter and timer updates on a metrics registry. Every metric
emitted for one request carries the same base tags describing the service,
endpoint, status and, for failed requests, the error.
"""

import logging
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .config import CollectorConfig
from .errors import ConfigurationError
from .fields import (
    UNKNOWN, COUNTERS, ERRORS, TAGS, TIMERS, Field, first_value, simple_class_name
)
from .monitoring.metrics import MetricId, Registry
from .naming import id_name
from .timing import MeasurementBag


logger = logging.getLogger(__name__)


class RequestMetricCollector(ABC):
    """Callback invoked by an instrumented client after each request."""

    @abstractmethod
    def collect_metrics(self, request: Any, response: Any = None) -> None:
        """
        Collect metrics for a completed request.

        Args:
            request: Request envelope carrying a ``metrics`` bag
            response: Response object, or None if the request failed
        """
        pass

    def is_enabled(self) -> bool:
        return True


class NoopRequestMetricCollector(RequestMetricCollector):
    """Collector that discards everything."""

    def collect_metrics(self, request: Any, response: Any = None) -> None:
        pass

    def is_enabled(self) -> bool:
        return False


NONE = NoopRequestMetricCollector()


class RequestMetricsCollector(RequestMetricCollector):
    """
    Collector that records request level metrics into a registry.

    Collection never raises: missing measurements are skipped or tagged as
    ``UNKNOWN`` and collaborator failures are logged.
    """

    def __init__(self, registry: Registry, config: Optional[CollectorConfig] = None):
        """
        Initialize collector.

        Args:
            registry: Registry to record metrics into
            config: Collector options (defaults to ``CollectorConfig()``)
        """
        if registry is None:
            raise ConfigurationError("registry must not be None")
        self.registry = registry
        self.config = config or CollectorConfig()

    def is_enabled(self) -> bool:
        return self.config.enabled

    def collect_metrics(self, request: Any, response: Any = None) -> None:
        bag = getattr(request, "metrics", None)
        if bag is None:
            return
        self.process(request, bag, getattr(bag, "enabled", True))

    def process(self, request: Any, bag: MeasurementBag, enabled: bool) -> None:
        """
        Record the measurements of one request.

        Args:
            request: Request envelope; ``original_request`` gives ``requestType``
            bag: Measurements recorded for the request
            enabled: Per-request switch; nothing is recorded when False
        """
        if not (enabled and self.config.enabled):
            return

        try:
            self._record(request, bag)
        except Exception:
            logger.warning("failed to collect request metrics", exc_info=True)

    def _record(self, request: Any, bag: MeasurementBag) -> None:
        base_tags = self.base_tags(request, bag)

        for counter in COUNTERS:
            value = _positive_count(counter, bag.counter(counter.name))
            if value is not None:
                self.registry.counter(self.metric_id(counter.name, base_tags)).increment(value)

        for timer in TIMERS:
            interval = bag.last_timing_interval(timer.name)
            if interval is not None and interval.end_time_known:
                self.registry.timer(self.metric_id(timer.name, base_tags)).record(
                    interval.end_nano - interval.start_nano)

        throttle_exceptions = bag.property_list(Field.ThrottleException.name)
        if throttle_exceptions:
            throttling = self.metric_id(self.config.throttling_name, base_tags)
            for ex in throttle_exceptions:
                self.registry.counter(
                    throttling.with_tag("throttleException", simple_class_name(ex))).increment()

    def base_tags(self, request: Any, bag: MeasurementBag) -> Mapping[str, str]:
        """
        Build the tags shared by every metric of one request.

        Args:
            request: Request envelope
            bag: Measurements recorded for the request

        Returns:
            Read-only tag mapping
        """
        tags: Dict[str, str] = {}
        for tag in TAGS:
            tags[tag.name] = _or_unknown(tag.get_value(bag))
        tags["requestType"] = _request_type(request)
        error = is_error(bag)
        if error:
            for tag in ERRORS:
                tags[tag.name] = _or_unknown(tag.get_value(bag))
        tags["error"] = "true" if error else "false"
        return MappingProxyType(tags)

    def metric_id(self, name: str, tags: Mapping[str, str]) -> MetricId:
        return self.registry.create_id(id_name(name, self.config.namespace), tags)


# Add alias for compatibility
RequestMetricsExtractor = RequestMetricsCollector


def is_error(bag: MeasurementBag) -> bool:
    """True if any error field has a value; the value itself is not inspected."""
    return any(tag.get_value(bag) is not None for tag in ERRORS)


def _or_unknown(value: Optional[str]) -> str:
    return UNKNOWN if value is None else value


def _request_type(request: Any) -> str:
    payload = getattr(request, "original_request", None)
    if payload is None:
        return UNKNOWN
    return simple_class_name(payload)


def _positive_count(field: Field, value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        count = int(value)
    except (TypeError, ValueError, OverflowError):
        logger.debug("ignoring non-numeric counter %s: %r", field.name, value)
        return None
    return count if count > 0 else None


__all__ = [
    "RequestMetricCollector",
    "NoopRequestMetricCollector",
    "NONE",
    "RequestMetricsCollector",
    "RequestMetricsExtractor",
    "first_value",
    "is_error"
]
