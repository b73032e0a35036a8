"""
Request metrics for ``requests`` sessions.

Provides a response hook that records each completed ``requests`` response
into a measurement bag and hands it to a request metric collector.
Requests that fail before a response exists never reach response hooks and
are not reported.
"""

import logging
from typing import Any, Optional
from urllib.parse import urlsplit

import requests

from ..collector import RequestMetricCollector
from ..fields import Field
from ..request import Request
from ..timing import RequestMetrics


logger = logging.getLogger(__name__)

ERROR_TYPE_HEADER = "x-amzn-ErrorType"

THROTTLE_STATUS_CODES = frozenset({429})


def _endpoint(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}"


def _http_error(response: requests.Response) -> Optional[requests.HTTPError]:
    if response.status_code is None:
        return None
    try:
        response.raise_for_status()
    except requests.HTTPError as e:
        return e
    return None


def _error_code(response: requests.Response) -> Optional[str]:
    error_type = response.headers.get(ERROR_TYPE_HEADER)
    if not error_type:
        return None
    return error_type.split(":", 1)[0] or None


def _content_length(response: requests.Response) -> Optional[int]:
    value = response.headers.get("Content-Length")
    if value is None:
        return None
    try:
        length = int(value)
    except ValueError:
        logger.debug("invalid Content-Length header: %s", value)
        return None
    return length if length >= 0 else None


def metrics_from_response(
    response: requests.Response,
    service_name: Optional[str] = None,
    stream: bool = False
) -> RequestMetrics:
    """
    Build a measurement bag from a completed response.

    Bytes processed come from the ``Content-Length`` header. Without one the
    body length is used, unless the response is streamed.

    Args:
        response: Response returned by ``requests``
        service_name: Name of the remote service
        stream: Whether the body is streamed and must not be read here

    Returns:
        Populated measurement bag
    """
    metrics = RequestMetrics()

    if service_name is not None:
        metrics.add_property(Field.ServiceName, service_name)

    url = response.request.url if response.request is not None else response.url
    endpoint = _endpoint(url)
    if endpoint is not None:
        metrics.add_property(Field.ServiceEndpoint, endpoint)

    if response.status_code is not None:
        metrics.add_property(Field.StatusCode, response.status_code)

    metrics.set_counter(Field.RequestCount, 1)

    if response.elapsed is not None:
        elapsed_nano = int(response.elapsed.total_seconds() * 1_000_000_000)
        metrics.add_timing(Field.HttpRequestTime, 0, elapsed_nano)

    length = _content_length(response)
    if length is None and not stream:
        content = response.content
        length = len(content) if content else None
    if length:
        metrics.set_counter(Field.BytesProcessed, length)

    error = _http_error(response)
    if error is not None:
        metrics.add_property(Field.Exception, error)
        code = _error_code(response)
        if code is not None:
            metrics.add_property(Field.AWSErrorCode, code)
        if response.status_code in THROTTLE_STATUS_CODES:
            metrics.add_property(Field.ThrottleException, error)

    return metrics


class RequestMetricsHook:
    """Response hook reporting every response of a session to a collector."""

    def __init__(self, collector: RequestMetricCollector, service_name: Optional[str] = None):
        """
        Initialize hook.

        Args:
            collector: Collector receiving each request
            service_name: Name of the remote service, used as a tag
        """
        self.collector = collector
        self.service_name = service_name

    def __call__(self, response: requests.Response, *args: Any, **kwargs: Any) -> None:
        if not self.collector.is_enabled():
            return None
        try:
            metrics = metrics_from_response(response, self.service_name, kwargs.get("stream", False))
            request = Request(response.request, metrics)
            self.collector.collect_metrics(request, response)
        except Exception:
            logger.warning("failed to report request metrics for %s", response.url, exc_info=True)
        # Returning None keeps the original response
        return None


def instrument_session(
    session: requests.Session,
    collector: RequestMetricCollector,
    service_name: Optional[str] = None
) -> requests.Session:
    """
    Report request metrics for every response of a session.

    Args:
        session: Session to instrument
        collector: Collector receiving each request
        service_name: Name of the remote service, used as a tag

    Returns:
        The same session
    """
    hooks = session.hooks.setdefault("response", [])
    if not isinstance(hooks, list):
        hooks = [hooks]
        session.hooks["response"] = hooks
    hooks.append(RequestMetricsHook(collector, service_name))
    return session


__all__ = [
    "ERROR_TYPE_HEADER",
    "RequestMetricsHook",
    "instrument_session",
    "metrics_from_response"
]
