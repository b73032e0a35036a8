"""
Request Metrics Error Model

Errors raised by this package. Collection itself never raises; these are
only used to reject invalid construction of collectors and configuration.
"""

from __future__ import annotations
from typing import Optional, Dict, Any


class RequestMetricsError(Exception):
    """
    Base class for all request metrics errors.
    """

    def __init__(self, message: str, cause: Optional[Exception] = None):
        """
        Initialize a request metrics error.

        Args:
            message: Error message
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        """String representation of the error."""
        if self.cause:
            return f"{self.message} | Caused by: {self.cause}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result: Dict[str, Any] = {
            "type": type(self).__name__,
            "message": self.message,
        }
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class ConfigurationError(RequestMetricsError):
    """A collector or its configuration was constructed with invalid arguments."""
    pass


__all__ = [
    "RequestMetricsError",
    "ConfigurationError"
]
