"""
Measurement fields and the tables of fields the collector reports.

``Field`` names the per-request measurements an instrumented SDK client can
record. The module-level tables decide which of them become counters,
timers and tags.
"""

import logging
import re
from enum import Enum
from typing import Any, Callable, Optional, Sequence, Tuple, TypeVar
from urllib.parse import urlsplit

from .naming import decapitalize


logger = logging.getLogger(__name__)

UNKNOWN = "UNKNOWN"

R = TypeVar("R")

# reg-name or bracketed IP literal (RFC 3986 section 3.2.2)
_URI_HOST = re.compile(r"^(?:[A-Za-z0-9\-._~!$&'()*+,;=%]+|\[[0-9A-Fa-f:.]+\])$")


class Field(Enum):
    """Per-request measurements recorded by an instrumented SDK client."""

    AWSErrorCode = "AWSErrorCode"
    AWSRequestID = "AWSRequestID"
    BytesProcessed = "BytesProcessed"
    ClientExecuteTime = "ClientExecuteTime"
    CredentialsRequestTime = "CredentialsRequestTime"
    Exception = "Exception"
    ThrottleException = "ThrottleException"
    HttpClientPoolAvailableCount = "HttpClientPoolAvailableCount"
    HttpClientPoolLeasedCount = "HttpClientPoolLeasedCount"
    HttpClientPoolPendingCount = "HttpClientPoolPendingCount"
    HttpClientReceiveResponseTime = "HttpClientReceiveResponseTime"
    HttpClientRetryCount = "HttpClientRetryCount"
    HttpClientSendRequestTime = "HttpClientSendRequestTime"
    HttpRequestTime = "HttpRequestTime"
    HttpSocketReadTime = "HttpSocketReadTime"
    RedirectLocation = "RedirectLocation"
    RequestCount = "RequestCount"
    RequestMarshallTime = "RequestMarshallTime"
    RequestSigningTime = "RequestSigningTime"
    ResponseProcessingTime = "ResponseProcessingTime"
    RetryCapacityConsumed = "RetryCapacityConsumed"
    RetryCount = "RetryCount"
    RetryPauseTime = "RetryPauseTime"
    ServiceEndpoint = "ServiceEndpoint"
    ServiceName = "ServiceName"
    StatusCode = "StatusCode"
    ThrottledRetryCount = "ThrottledRetryCount"


def field_name(field) -> str:
    """Get the measurement name for a ``Field`` member or a raw string."""
    if isinstance(field, Field):
        return field.name
    return str(field)


def simple_class_name(value: Any) -> str:
    """Unqualified class name of a value, e.g. ``HTTPError``."""
    return type(value).__name__


def first_value(properties: Optional[Sequence[Any]],
                transform: Callable[[Any], Optional[R]]) -> Optional[R]:
    """
    Extract and transform the first item from a list.

    Args:
        properties: The list of properties, may be None or empty
        transform: Applied only if the list has a non-None item at index 0

    Returns:
        The transformed value, or None if there is no non-None item at
        index 0 of the list
    """
    if not properties:
        return None
    head = properties[0]
    if head is None:
        return None
    return transform(head)


def get_host(endpoint: Any) -> Optional[str]:
    """
    Extract the host from an endpoint URI.

    Args:
        endpoint: Endpoint URI, usually a string

    Returns:
        Host name in its original case, ``None`` if the URI has no host, or
        ``UNKNOWN`` if it cannot be parsed
    """
    try:
        parts = urlsplit(str(endpoint))
        # Raises ValueError for a non-numeric or out of range port
        parts.port
    except ValueError as e:
        logger.debug("failed to parse endpoint uri: %s", endpoint, exc_info=e)
        return UNKNOWN

    if parts.hostname is None:
        return None
    host = parts.netloc.rpartition("@")[2]
    if host.startswith("["):
        host = host[:host.find("]") + 1]
    else:
        host = host.partition(":")[0]
    if not _URI_HOST.match(host):
        logger.debug("invalid host in endpoint uri: %s", endpoint)
        return UNKNOWN
    return host


class TagField:
    """
    Declares a measurement that becomes a tag on every emitted metric.

    The tag key is the decapitalized field name. The tag value is the first
    recorded value of the field after applying ``transform``.
    """

    def __init__(self, field: Field, transform: Callable[[Any], Optional[str]] = str):
        self.field = field
        self.name = decapitalize(field.name)
        self.transform = transform

    def get_value(self, bag) -> Optional[str]:
        """
        Extract the tag value from a measurement bag.

        Args:
            bag: Measurement bag to read

        Returns:
            Transformed first value, or ``None`` if the field has no value.
            A failing transform yields ``UNKNOWN``; a failing bag raises.
        """
        properties = bag.property_list(self.field.name)
        try:
            return first_value(properties, self.transform)
        except Exception as e:
            logger.debug("failed to extract tag %s", self.name, exc_info=e)
            return UNKNOWN

    def __repr__(self) -> str:
        return f"TagField({self.field.name!r}, name={self.name!r})"


TIMERS: Tuple[Field, ...] = (
    Field.ClientExecuteTime,
    Field.CredentialsRequestTime,
    Field.HttpClientReceiveResponseTime,
    Field.HttpClientSendRequestTime,
    Field.HttpRequestTime,
    Field.RequestMarshallTime,
    Field.RequestSigningTime,
    Field.ResponseProcessingTime,
    Field.RetryPauseTime,
)

COUNTERS: Tuple[Field, ...] = (
    Field.BytesProcessed,
    Field.HttpClientRetryCount,
    Field.RequestCount,
)

TAGS: Tuple[TagField, ...] = (
    TagField(Field.ServiceEndpoint, get_host),
    TagField(Field.ServiceName),
    TagField(Field.StatusCode),
)

ERRORS: Tuple[TagField, ...] = (
    TagField(Field.AWSErrorCode),
    TagField(Field.Exception, simple_class_name),
)


__all__ = [
    "UNKNOWN",
    "Field",
    "TagField",
    "TIMERS",
    "COUNTERS",
    "TAGS",
    "ERRORS",
    "field_name",
    "first_value",
    "get_host",
    "simple_class_name"
]
