"""
Tests for the requests response hook.

Responses are built in memory; nothing is sent over the network.
"""

from datetime import timedelta
from unittest.mock import Mock

import pytest
import requests

from request_metrics import MetricId, MetricsRegistry, RequestMetricsCollector
from request_metrics.collector import NONE
from request_metrics.integrations import (
    RequestMetricsHook, instrument_session, metrics_from_response
)


def make_response(url="https://s3.amazonaws.com/bucket/key", status=200, body=b"hello",
                  elapsed_ms=250, headers=None, reason="OK"):
    response = requests.Response()
    response.request = requests.Request("GET", url).prepare()
    response.url = url
    response.status_code = status
    response.reason = reason
    response.elapsed = timedelta(milliseconds=elapsed_ms)
    response._content = body
    response.headers.update(headers or {})
    return response


@pytest.mark.integration
def test_metrics_from_successful_response():
    metrics = metrics_from_response(make_response(), "s3")

    assert metrics.property_list("ServiceName") == ["s3"]
    assert metrics.property_list("ServiceEndpoint") == ["https://s3.amazonaws.com"]
    assert metrics.property_list("StatusCode") == [200]
    assert metrics.counter("RequestCount") == 1
    assert metrics.counter("BytesProcessed") == 5
    assert metrics.last_timing_interval("HttpRequestTime").duration_nano == 250_000_000
    assert metrics.property_list("Exception") is None


@pytest.mark.integration
def test_metrics_from_error_response():
    response = make_response(
        status=403, reason="Forbidden",
        headers={"x-amzn-ErrorType": "AccessDeniedException:http://internal.amazon.com/"})

    metrics = metrics_from_response(response, "dynamodb")

    assert metrics.property_list("AWSErrorCode") == ["AccessDeniedException"]
    exception = metrics.property_list("Exception")[0]
    assert isinstance(exception, requests.HTTPError)
    assert metrics.property_list("ThrottleException") is None


@pytest.mark.integration
def test_metrics_from_throttled_response():
    response = make_response(status=429, reason="Too Many Requests", body=b"")

    metrics = metrics_from_response(response)

    assert metrics.property_list("ServiceName") is None
    assert metrics.counter("BytesProcessed") is None
    assert len(metrics.property_list("ThrottleException")) == 1


@pytest.mark.integration
def test_hook_reports_to_collector():
    registry = MetricsRegistry()
    hook = RequestMetricsHook(RequestMetricsCollector(registry), "s3")

    assert hook(make_response()) is None

    tags = {
        "serviceEndpoint": "s3.amazonaws.com",
        "serviceName": "s3",
        "statusCode": "200",
        "requestType": "PreparedRequest",
        "error": "false",
    }
    assert registry.counter(MetricId("aws.request.requestCount", tags)).count() == 1
    assert registry.counter(MetricId("aws.request.bytesProcessed", tags)).count() == 5
    assert registry.timer(MetricId("aws.request.httpRequestTime", tags)).total_time() == 250_000_000


@pytest.mark.integration
def test_hook_reports_throttling():
    registry = MetricsRegistry()
    hook = RequestMetricsHook(RequestMetricsCollector(registry), "s3")

    hook(make_response(status=429, reason="Too Many Requests"))

    throttled = [c for c in registry.counters() if c.id.name == "aws.request.throttling"]
    assert len(throttled) == 1
    assert throttled[0].count() == 1
    assert throttled[0].id.tags["throttleException"] == "HTTPError"
    assert throttled[0].id.tags["exception"] == "HTTPError"
    assert throttled[0].id.tags["AWSErrorCode"] == "UNKNOWN"


@pytest.mark.integration
def test_hook_skips_disabled_collector():
    collector = Mock(wraps=NONE)

    RequestMetricsHook(collector)(make_response())

    collector.collect_metrics.assert_not_called()


@pytest.mark.integration
def test_hook_never_raises(caplog):
    collector = Mock()
    collector.is_enabled.return_value = True
    collector.collect_metrics.side_effect = RuntimeError("boom")

    RequestMetricsHook(collector)(make_response())

    assert "failed to report request metrics" in caplog.text


@pytest.mark.integration
def test_instrument_session():
    session = requests.Session()
    collector = RequestMetricsCollector(MetricsRegistry())

    assert instrument_session(session, collector, "s3") is session

    hooks = session.hooks["response"]
    assert len(hooks) == 1
    assert isinstance(hooks[0], RequestMetricsHook)
    assert hooks[0].collector is collector
    assert hooks[0].service_name == "s3"


@pytest.mark.integration
def test_bytes_processed_prefers_content_length():
    response = make_response(headers={"Content-Length": "1024"})

    metrics = metrics_from_response(response)

    assert metrics.counter("BytesProcessed") == 1024


@pytest.mark.integration
def test_bytes_processed_ignores_invalid_content_length():
    response = make_response(headers={"Content-Length": "lots"})

    assert metrics_from_response(response).counter("BytesProcessed") == 5


@pytest.mark.integration
def test_streamed_body_is_not_read():
    response = make_response()
    response._content = False
    response.raw = Mock()

    metrics = metrics_from_response(response, stream=True)

    assert metrics.counter("BytesProcessed") is None
    response.raw.stream.assert_not_called()
    response.raw.read.assert_not_called()


@pytest.mark.integration
def test_streamed_body_uses_content_length():
    response = make_response(headers={"Content-Length": "42"})
    response._content = False
    response.raw = Mock()

    hook = RequestMetricsHook(RequestMetricsCollector(MetricsRegistry()))
    metrics = metrics_from_response(response, stream=True)

    assert metrics.counter("BytesProcessed") == 42
    hook(response, stream=True)
    response.raw.stream.assert_not_called()
    response.raw.read.assert_not_called()
