"""
Integrations feeding request metric collectors from HTTP client libraries.
"""

from .requests_hook import RequestMetricsHook, instrument_session, metrics_from_response

__all__ = [
    "RequestMetricsHook",
    "instrument_session",
    "metrics_from_response"
]
