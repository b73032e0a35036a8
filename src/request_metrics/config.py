"""
Collector configuration.
"""

from __future__ import annotations
import os
from typing import Mapping, Optional
from pydantic import BaseModel, Field, field_validator

from .naming import DEFAULT_PREFIX


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class CollectorConfig(BaseModel):
    """
    Options for the request metrics collector.

    ``enabled`` is a global switch; a request is reported only when both it
    and the request's own enabled flag are set.
    """
    enabled: bool = Field(default=True, description="Report request metrics")
    namespace: str = Field(default=DEFAULT_PREFIX, description="Prefix for metric names")
    throttling_name: str = Field(default="throttling", min_length=1,
                                 description="Name of the throttle exception counter")

    model_config = {"frozen": True}

    @field_validator("namespace")
    @classmethod
    def _namespace_ends_with_dot(cls, v: str) -> str:
        if v and not v.endswith("."):
            raise ValueError("namespace must be empty or end with '.'")
        return v

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CollectorConfig":
        """
        Build a configuration from environment variables.

        Reads ``REQUEST_METRICS_ENABLED`` and ``REQUEST_METRICS_NAMESPACE``;
        unset variables keep their defaults.

        Args:
            environ: Mapping to read instead of ``os.environ``

        Returns:
            Collector configuration
        """
        env = os.environ if environ is None else environ
        values = {}

        enabled = env.get("REQUEST_METRICS_ENABLED")
        if enabled is not None:
            flag = enabled.strip().lower()
            if flag in _TRUE_VALUES:
                values["enabled"] = True
            elif flag in _FALSE_VALUES:
                values["enabled"] = False
            else:
                raise ValueError(f"Invalid REQUEST_METRICS_ENABLED value: {enabled!r}")

        namespace = env.get("REQUEST_METRICS_NAMESPACE")
        if namespace is not None:
            values["namespace"] = namespace

        return cls(**values)


__all__ = ["CollectorConfig"]
