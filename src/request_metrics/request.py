"""
Request envelope handed to request metric collectors.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .fields import Field
from .timing import RequestMetrics


@dataclass
class Request:
    """An outbound SDK request together with its measurement bag."""
    original_request: Any
    metrics: Optional[RequestMetrics] = field(default_factory=RequestMetrics)

    @classmethod
    def for_payload(
        cls,
        payload: Any,
        service_name: Optional[str] = None,
        endpoint: Optional[str] = None,
        enabled: bool = True
    ) -> "Request":
        """
        Create a request with a fresh measurement bag.

        The service name and endpoint, when given, are recorded in the bag
        so they show up as tags.

        Args:
            payload: SDK request object; its class name becomes ``requestType``
            service_name: Name of the remote service
            endpoint: Service endpoint URI
            enabled: Whether the bag records measurements

        Returns:
            Request envelope
        """
        metrics = RequestMetrics(enabled=enabled)
        if service_name is not None:
            metrics.add_property(Field.ServiceName, service_name)
        if endpoint is not None:
            metrics.add_property(Field.ServiceEndpoint, endpoint)
        return cls(payload, metrics)


__all__ = ["Request"]
