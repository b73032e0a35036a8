"""
Shared fixtures for request metrics tests.
"""
from unittest.mock import Mock

import pytest

from request_metrics import (
    Counter, Field, MetricsRegistry, Registry, Request, RequestMetricsCollector, Timer
)


class GetObjectRequest:
    """Stand-in SDK request payload."""
    pass


class ThrottlingException(Exception):
    pass


class RecordingRegistry(Registry):
    """Registry handing out mock metrics and remembering every lookup."""

    def __init__(self):
        self.calls = []
        self.counters = {}
        self.timers = {}

    def counter(self, metric_id):
        self.calls.append(("counter", metric_id))
        return self.counters.setdefault(metric_id, Mock(spec=Counter))

    def timer(self, metric_id):
        self.calls.append(("timer", metric_id))
        return self.timers.setdefault(metric_id, Mock(spec=Timer))


@pytest.fixture
def registry():
    """Fresh in-memory registry for each test."""
    return MetricsRegistry()


@pytest.fixture
def recording_registry():
    return RecordingRegistry()


@pytest.fixture
def collector(recording_registry):
    return RequestMetricsCollector(recording_registry)


@pytest.fixture
def s3_request():
    """Request to s3 with a service name and endpoint recorded."""
    return Request.for_payload(GetObjectRequest(), service_name="s3", endpoint="https://s3.amazonaws.com")


@pytest.fixture
def failed_request(s3_request):
    """Request that ended with a throttling error."""
    s3_request.metrics.add_property(Field.StatusCode, 400)
    s3_request.metrics.add_property(Field.AWSErrorCode, "Throttling")
    s3_request.metrics.add_property(Field.Exception, ThrottlingException("slow down"))
    return s3_request
