"""
Per-request measurement bag.

An instrumented client records counters, timing intervals and property
values for a single request into a ``RequestMetrics``. The collector reads
the bag once through the ``MeasurementBag`` interface after the request
completes.
"""

import time
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from .fields import Field, field_name


FieldLike = Union[Field, str]


@dataclass(frozen=True)
class TimingInterval:
    """A measured interval; ``end_nano`` is None while it is still open."""
    start_nano: int
    end_nano: Optional[int] = None

    @property
    def end_time_known(self) -> bool:
        return self.end_nano is not None

    @property
    def duration_nano(self) -> Optional[int]:
        if self.end_nano is None:
            return None
        return self.end_nano - self.start_nano

    def end(self, end_nano: Optional[int] = None) -> "TimingInterval":
        """Close the interval, defaulting to the current monotonic time."""
        return TimingInterval(self.start_nano, time.perf_counter_ns() if end_nano is None else end_nano)


class TimingInfo:
    """Counters and timing sub-measurements recorded for one request."""

    def __init__(self):
        self._counters: Dict[str, Union[int, float]] = {}
        self._sub_measurements: Dict[str, List[TimingInterval]] = defaultdict(list)

    def get_counter(self, name: str) -> Optional[Union[int, float]]:
        return self._counters.get(name)

    def set_counter(self, name: str, value: Union[int, float]) -> None:
        self._counters[name] = value

    def increment_counter(self, name: str) -> None:
        self._counters[name] = self._counters.get(name, 0) + 1

    def add_sub_measurement(self, name: str, interval: TimingInterval) -> None:
        self._sub_measurements[name].append(interval)

    def get_last_sub_measurement(self, name: str) -> Optional[TimingInterval]:
        intervals = self._sub_measurements.get(name)
        if not intervals:
            return None
        return intervals[-1]

    def get_all_sub_measurements(self, name: str) -> List[TimingInterval]:
        return list(self._sub_measurements.get(name, ()))

    def end_last_sub_measurement(self, name: str, end_nano: Optional[int] = None) -> None:
        """Close the most recent interval for a name if it is still open."""
        intervals = self._sub_measurements.get(name)
        if intervals and not intervals[-1].end_time_known:
            intervals[-1] = intervals[-1].end(end_nano)


class MeasurementBag(ABC):
    """
    Read-only view of the measurements recorded for one request.

    Every accessor returns None when nothing was recorded under the name.
    """

    @abstractmethod
    def counter(self, name: str) -> Optional[Union[int, float]]:
        """Get a counter value."""
        pass

    @abstractmethod
    def last_timing_interval(self, name: str) -> Optional[TimingInterval]:
        """Get the most recent timing interval."""
        pass

    @abstractmethod
    def property_list(self, name: str) -> Optional[List[Any]]:
        """Get the ordered values recorded for a property."""
        pass


class RequestMetrics(MeasurementBag):
    """
    Measurement bag populated by an instrumented client.

    Fields may be given as ``Field`` members or raw measurement names. A
    disabled bag ignores everything recorded into it.
    """

    def __init__(self, enabled: bool = True):
        """
        Initialize request metrics.

        Args:
            enabled: Whether measurements are recorded and reported
        """
        self.enabled = enabled
        self.timing_info = TimingInfo()
        self._properties: Dict[str, List[Any]] = defaultdict(list)

    @classmethod
    def disabled(cls) -> "RequestMetrics":
        """Create a bag that records nothing."""
        return cls(enabled=False)

    # Population

    def add_property(self, field: FieldLike, value: Any) -> None:
        """Append a value to a property list."""
        if self.enabled:
            self._properties[field_name(field)].append(value)

    def get_property(self, field: FieldLike) -> Optional[List[Any]]:
        """Get the values recorded for a property, or None."""
        values = self._properties.get(field_name(field))
        if values is None:
            return None
        return list(values)

    def set_counter(self, field: FieldLike, value: Union[int, float]) -> None:
        if self.enabled:
            self.timing_info.set_counter(field_name(field), value)

    def increment_counter(self, field: FieldLike) -> None:
        if self.enabled:
            self.timing_info.increment_counter(field_name(field))

    def start_event(self, field: FieldLike, start_nano: Optional[int] = None) -> None:
        """Open a timing interval for a field."""
        if self.enabled:
            start = time.perf_counter_ns() if start_nano is None else start_nano
            self.timing_info.add_sub_measurement(field_name(field), TimingInterval(start))

    def end_event(self, field: FieldLike, end_nano: Optional[int] = None) -> None:
        """Close the most recent open interval for a field."""
        if self.enabled:
            self.timing_info.end_last_sub_measurement(field_name(field), end_nano)

    def add_timing(self, field: FieldLike, start_nano: int, end_nano: Optional[int]) -> None:
        """Record an interval measured elsewhere."""
        if self.enabled:
            self.timing_info.add_sub_measurement(field_name(field), TimingInterval(start_nano, end_nano))

    # MeasurementBag

    def counter(self, name: str) -> Optional[Union[int, float]]:
        return self.timing_info.get_counter(name)

    def last_timing_interval(self, name: str) -> Optional[TimingInterval]:
        return self.timing_info.get_last_sub_measurement(name)

    def property_list(self, name: str) -> Optional[List[Any]]:
        return self.get_property(name)


__all__ = [
    "TimingInterval",
    "TimingInfo",
    "MeasurementBag",
    "RequestMetrics"
]
