"""Schema definitions for sluice.

This module exports the input document models:

Root Models:
- PipelineSpec: Root schema for pipeline.yaml (the pipeline graph)
- DeploymentConfig: Root schema for deployment.yaml (global deployment parameters)

Section Models:
- StepSpec: One source, processor or sink declaration
- EnvVar: Processor environment entry
- ObservabilityConfig: Tracing configuration
- ProcessorDefaults: Processor container settings
- ScalingConfig: KEDA trigger parameters
- TopicDefaults: Strimzi topic parameters
- BrokerConfig: Dapr Kafka component settings
"""

from __future__ import annotations

from sluice_core.schemas.deployment_config import (
    DEFAULT_BROKER,
    NAMESPACE_PATTERN,
    BrokerConfig,
    DeploymentConfig,
    ProcessorDefaults,
    ScalingConfig,
    TopicDefaults,
)
from sluice_core.schemas.observability import (
    DEFAULT_TRACING_CONFIG_NAME,
    DEFAULT_TRACING_ENDPOINT,
    ObservabilityConfig,
)
from sluice_core.schemas.pipeline_spec import EnvVar, PipelineSpec, StepSpec

__all__ = [
    # Root models
    "PipelineSpec",
    "DeploymentConfig",
    # Pipeline sections
    "StepSpec",
    "EnvVar",
    # Deployment sections
    "ObservabilityConfig",
    "ProcessorDefaults",
    "ScalingConfig",
    "TopicDefaults",
    "BrokerConfig",
    # Constants
    "DEFAULT_BROKER",
    "DEFAULT_TRACING_CONFIG_NAME",
    "DEFAULT_TRACING_ENDPOINT",
    "NAMESPACE_PATTERN",
]
