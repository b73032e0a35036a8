"""
Metric identifiers and registry for request metrics.

Provides the registry collaborator interface the collector records into,
plus a thread-safe in-memory registry with counters and timers keyed by
tagged metric identifiers.
"""

import threading
import time
from abc import ABC, abstractmethod
from collections import defaultdict
from enum import Enum
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Any, Union


class MetricType(Enum):
    """Types of metrics."""
    COUNTER = "counter"
    TIMER = "timer"


class MetricId:
    """
    Immutable metric identifier made of a name and a set of tags.

    Two identifiers with the same name and the same tags are equal and
    hash the same, so they aggregate into the same metric.
    """

    __slots__ = ("_name", "_tags")

    def __init__(self, name: str, tags: Optional[Mapping[str, str]] = None):
        """
        Initialize metric identifier.

        Args:
            name: Metric name
            tags: Tag key/value pairs
        """
        self._name = name
        self._tags: Tuple[Tuple[str, str], ...] = tuple(sorted((tags or {}).items()))

    @property
    def name(self) -> str:
        """Get metric name."""
        return self._name

    @property
    def tags(self) -> Dict[str, str]:
        """Get a copy of the tags."""
        return dict(self._tags)

    def with_tag(self, key: str, value: str) -> "MetricId":
        """
        Create a new identifier with an additional tag.

        Args:
            key: Tag key (replaces an existing tag with the same key)
            value: Tag value

        Returns:
            New metric identifier
        """
        tags = dict(self._tags)
        tags[key] = value
        return MetricId(self._name, tags)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, MetricId):
            return self._name == other._name and self._tags == other._tags
        return False

    def __hash__(self) -> int:
        return hash((self._name, self._tags))

    def __repr__(self) -> str:
        tags = ",".join(f"{k}={v}" for k, v in self._tags)
        return f"MetricId('{self._name}', {{{tags}}})"


class Metric(ABC):
    """
    Abstract base class for metrics.

    Each metric instance is bound to a single identifier and guards its
    state with a lock so it can be updated from many requests at once.
    """

    def __init__(self, metric_id: MetricId):
        """
        Initialize metric.

        Args:
            metric_id: Identifier this metric records under
        """
        self.id = metric_id
        self._lock = threading.RLock()
        self._created_at = time.time()

    @property
    @abstractmethod
    def metric_type(self) -> MetricType:
        """Get metric type."""
        pass

    @abstractmethod
    def get_value(self) -> Union[int, Dict[str, Any]]:
        """Get current metric value."""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Reset metric to initial state."""
        pass

    def get_info(self) -> Dict[str, Any]:
        """Get metric information."""
        return {
            "name": self.id.name,
            "tags": self.id.tags,
            "type": self.metric_type.value,
            "created_at": self._created_at
        }


class Counter(Metric):
    """
    Counter metric that only increases.

    Tracks cumulative values like request counts or bytes processed.
    """

    def __init__(self, metric_id: MetricId):
        """Initialize counter."""
        super().__init__(metric_id)
        self._count = 0

    @property
    def metric_type(self) -> MetricType:
        """Get metric type."""
        return MetricType.COUNTER

    def increment(self, amount: int = 1) -> None:
        """
        Increment counter.

        Args:
            amount: Amount to increment (must be >= 0)
        """
        if amount < 0:
            raise ValueError("Counter increment must be >= 0")

        with self._lock:
            self._count += amount

    def count(self) -> int:
        """Get counter value."""
        with self._lock:
            return self._count

    def get_value(self) -> int:
        """Get counter value."""
        return self.count()

    def reset(self) -> None:
        """Reset counter."""
        with self._lock:
            self._count = 0


class Timer(Metric):
    """
    Timer metric for measuring durations.

    Durations are recorded in nanoseconds. Negative durations cannot come
    from a well-formed interval and are dropped.
    """

    def __init__(self, metric_id: MetricId):
        """Initialize timer."""
        super().__init__(metric_id)
        self._count = 0
        self._total_time = 0
        self._max_time = 0

    @property
    def metric_type(self) -> MetricType:
        """Get metric type."""
        return MetricType.TIMER

    def record(self, amount: int) -> None:
        """
        Record a duration.

        Args:
            amount: Duration in nanoseconds
        """
        if amount < 0:
            return

        with self._lock:
            self._count += 1
            self._total_time += amount
            self._max_time = max(self._max_time, amount)

    def count(self) -> int:
        """Number of recorded durations."""
        with self._lock:
            return self._count

    def total_time(self) -> int:
        """Sum of recorded durations in nanoseconds."""
        with self._lock:
            return self._total_time

    def max_time(self) -> int:
        """Largest recorded duration in nanoseconds."""
        with self._lock:
            return self._max_time

    def get_stats(self) -> Dict[str, Any]:
        """
        Get timer statistics.

        Returns:
            Statistics dictionary with count, total, mean and max in nanoseconds
        """
        with self._lock:
            return {
                "count": self._count,
                "total_time": self._total_time,
                "mean": self._total_time / self._count if self._count else 0.0,
                "max": self._max_time
            }

    def get_value(self) -> Dict[str, Any]:
        """Get timer statistics."""
        return self.get_stats()

    def reset(self) -> None:
        """Reset timer."""
        with self._lock:
            self._count = 0
            self._total_time = 0
            self._max_time = 0


class Registry(ABC):
    """
    Registry collaborator the request metrics collector records into.

    Implementations must be safe to use from many concurrent requests.
    """

    def create_id(self, name: str, tags: Optional[Mapping[str, str]] = None) -> MetricId:
        """
        Create a metric identifier.

        Args:
            name: Metric name
            tags: Tag key/value pairs

        Returns:
            Metric identifier
        """
        return MetricId(name, tags)

    @abstractmethod
    def counter(self, metric_id: MetricId) -> Counter:
        """Get or create the counter for an identifier."""
        pass

    @abstractmethod
    def timer(self, metric_id: MetricId) -> Timer:
        """Get or create the timer for an identifier."""
        pass


class MetricsRegistry(Registry):
    """
    In-memory registry for managing metrics.

    Thread-safe registry that keeps one metric per identifier and provides
    utilities for retrieval and bulk operations.
    """

    def __init__(self):
        """Initialize metrics registry."""
        self._metrics: Dict[MetricId, Metric] = {}
        self._lock = threading.RLock()

    def counter(self, metric_id: MetricId) -> Counter:
        """
        Get or create a counter metric.

        Args:
            metric_id: Metric identifier

        Returns:
            Counter metric
        """
        with self._lock:
            if metric_id in self._metrics:
                metric = self._metrics[metric_id]
                if not isinstance(metric, Counter):
                    raise ValueError(f"Metric {metric_id!r} exists but is not a Counter")
                return metric

            counter = Counter(metric_id)
            self._metrics[metric_id] = counter
            return counter

    def timer(self, metric_id: MetricId) -> Timer:
        """
        Get or create a timer metric.

        Args:
            metric_id: Metric identifier

        Returns:
            Timer metric
        """
        with self._lock:
            if metric_id in self._metrics:
                metric = self._metrics[metric_id]
                if not isinstance(metric, Timer):
                    raise ValueError(f"Metric {metric_id!r} exists but is not a Timer")
                return metric

            timer = Timer(metric_id)
            self._metrics[metric_id] = timer
            return timer

    def get_metric(self, metric_id: MetricId) -> Optional[Metric]:
        """Get metric by identifier."""
        with self._lock:
            return self._metrics.get(metric_id)

    def list_ids(self) -> List[MetricId]:
        """Get list of metric identifiers."""
        with self._lock:
            return list(self._metrics.keys())

    def counters(self) -> Iterator[Counter]:
        """Iterate over registered counters."""
        with self._lock:
            metrics = list(self._metrics.values())
        return (m for m in metrics if isinstance(m, Counter))

    def timers(self) -> Iterator[Timer]:
        """Iterate over registered timers."""
        with self._lock:
            metrics = list(self._metrics.values())
        return (m for m in metrics if isinstance(m, Timer))

    def clear(self) -> None:
        """Clear all metrics from registry."""
        with self._lock:
            self._metrics.clear()

    def get_stats(self) -> Dict[str, Any]:
        """Get registry statistics."""
        with self._lock:
            metric_types = defaultdict(int)
            names = set()
            for metric_id, metric in self._metrics.items():
                metric_types[metric.metric_type.value] += 1
                names.add(metric_id.name)

            return {
                "total_metrics": len(self._metrics),
                "metric_types": dict(metric_types),
                "metric_names": sorted(names)
            }


# Global registry instance
_global_registry = MetricsRegistry()


def get_registry() -> MetricsRegistry:
    """Get the global metrics registry."""
    return _global_registry


__all__ = [
    "MetricsRegistry",
    "Registry",
    "Metric",
    "MetricId",
    "MetricType",
    "Counter",
    "Timer",
    "get_registry"
]
