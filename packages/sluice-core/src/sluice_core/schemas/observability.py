"""Observability configuration models for sluice.

This module defines the tracing configuration rendered into the single
Dapr ``Configuration`` object shared by every processor sidecar.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TRACING_ENDPOINT = "http://zipkin.observability:9411/api/v2/spans"

# Name referenced by the dapr.io/config annotation of every processor
DEFAULT_TRACING_CONFIG_NAME = "tracing-config"


class ObservabilityConfig(BaseModel):
    """Tracing configuration for the generated mesh.

    Attributes:
        tracing_endpoint: Zipkin-compatible span collector URL.
        tracing_sampling_rate: Fraction of requests traced (0.0 to 1.0).
        config_name: Name of the Dapr Configuration object.

    Example:
        >>> config = ObservabilityConfig(
        ...     tracing_endpoint="http://zipkin.observability:9411/api/v2/spans",
        ...     tracing_sampling_rate=0.25,
        ... )
        >>> config.sampling_rate_str
        '0.25'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    tracing_endpoint: str = Field(
        default=DEFAULT_TRACING_ENDPOINT,
        min_length=1,
        description="Zipkin-compatible span collector URL",
    )
    tracing_sampling_rate: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Fraction of requests traced (0.0 to 1.0)",
    )
    config_name: str = Field(
        default=DEFAULT_TRACING_CONFIG_NAME,
        min_length=1,
        description="Name of the Dapr Configuration object",
    )

    @property
    def sampling_rate_str(self) -> str:
        """Sampling rate as Dapr expects it: a string, without trailing zeros."""
        return format(self.tracing_sampling_rate, "g")
