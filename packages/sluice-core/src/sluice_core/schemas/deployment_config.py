"""Deployment configuration models for sluice.

This module defines the deployment.yaml schema:
- DeploymentConfig: Root model (namespace, brokers, topic mappings)
- ProcessorDefaults: Container settings shared by all processors
- ScalingConfig: KEDA ScaledObject parameters
- TopicDefaults: Strimzi KafkaTopic parameters for inter-processor streams
- BrokerConfig: Dapr Kafka component settings

One DeploymentConfig instance is threaded, read-only, through the
synthesis of every node. Every setting apart from the broker list and
the topic mappings has a default.

Example deployment.yaml:

    namespace: clickstream
    brokers:
      - my-cluster-kafka-brokers.kafka:9092
    source_topics:
      kafka-ingress-0: clicks-raw
    sink_topics:
      kafka-egress-0: clicks-enriched
    observability:
      tracing_sampling_rate: 0.5
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from sluice_core.errors import UnmappedTopicError
from sluice_core.schemas.observability import ObservabilityConfig

# Kubernetes namespace names are RFC 1123 DNS labels
NAMESPACE_PATTERN = r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$"

DEFAULT_BROKER = "my-cluster-kafka-brokers.kafka:9092"


class ProcessorDefaults(BaseModel):
    """Container settings applied to every processor Deployment and Service.

    Attributes:
        image: Container image run by each processor.
        app_port: Port the processor application listens on.
        service_port: Port exposed by the processor Service.
        replicas: Initial Deployment replica count.
        service_type: Kubernetes Service type.
        image_pull_policy: Container image pull policy.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    image: str = Field(
        default="verstraetebert/simple-transformer:1",
        min_length=1,
        description="Container image run by each processor",
    )
    app_port: int = Field(
        default=5000,
        ge=1,
        le=65535,
        description="Port the processor application listens on",
    )
    service_port: int = Field(
        default=80,
        ge=1,
        le=65535,
        description="Port exposed by the processor Service",
    )
    replicas: int = Field(
        default=1,
        ge=0,
        description="Initial Deployment replica count",
    )
    service_type: str = Field(
        default="LoadBalancer",
        description="Kubernetes Service type",
    )
    image_pull_policy: str = Field(
        default="Always",
        description="Container image pull policy",
    )


class ScalingConfig(BaseModel):
    """KEDA Kafka trigger parameters.

    Attributes:
        polling_interval: Seconds between lag checks.
        min_replicas: Lower replica bound (0 allows scale to zero).
        max_replicas: Upper replica bound.
        lag_threshold: Consumer lag per replica that triggers scaling.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    polling_interval: int = Field(
        default=15,
        ge=1,
        description="Seconds between lag checks",
    )
    min_replicas: int = Field(
        default=0,
        ge=0,
        description="Lower replica bound",
    )
    max_replicas: int = Field(
        default=5,
        ge=1,
        description="Upper replica bound",
    )
    lag_threshold: int = Field(
        default=5,
        ge=1,
        description="Consumer lag per replica that triggers scaling",
    )


class TopicDefaults(BaseModel):
    """Strimzi KafkaTopic parameters for generated inter-processor streams.

    Attributes:
        cluster: Strimzi cluster label value.
        namespace: Namespace the Strimzi operator watches.
        partitions: Partition count.
        replicas: Replication factor.
        retention_ms: Message retention in milliseconds.
        segment_bytes: Log segment size in bytes.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    cluster: str = Field(
        default="my-cluster",
        min_length=1,
        description="Strimzi cluster label value",
    )
    namespace: str = Field(
        default="kafka",
        pattern=NAMESPACE_PATTERN,
        description="Namespace the Strimzi operator watches",
    )
    partitions: int = Field(
        default=5,
        ge=1,
        description="Partition count",
    )
    replicas: int = Field(
        default=1,
        ge=1,
        description="Replication factor",
    )
    retention_ms: int = Field(
        default=7200000,
        ge=0,
        description="Message retention in milliseconds",
    )
    segment_bytes: int = Field(
        default=1073741824,
        ge=1,
        description="Log segment size in bytes",
    )


class BrokerConfig(BaseModel):
    """Settings shared by the generated Dapr Kafka bindings and pubsub brokers.

    Attributes:
        auth_required: Whether the Kafka cluster requires authentication.
        max_message_bytes: Maximum message size for pubsub brokers.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    auth_required: bool = Field(
        default=False,
        description="Whether the Kafka cluster requires authentication",
    )
    max_message_bytes: int = Field(
        default=1024,
        ge=1,
        description="Maximum message size for pubsub brokers",
    )


class DeploymentConfig(BaseModel):
    """Global, read-only deployment parameters for one compilation run.

    Attributes:
        namespace: Kubernetes namespace of the pipeline. When omitted the
            pipeline name is used (see ``for_pipeline``).
        brokers: Kafka bootstrap addresses.
        source_topics: Source name -> Kafka topic consumed by that source.
        sink_topics: Sink name -> Kafka topic published by that sink.
        observability: Tracing configuration.
        processor: Processor container settings.
        scaling: KEDA trigger parameters.
        topics: Strimzi topic parameters.
        broker: Dapr Kafka component settings.

    Example:
        >>> config = DeploymentConfig(
        ...     namespace="p1",
        ...     brokers=["kafka:9092"],
        ...     source_topics={"s1": "topicA"},
        ...     sink_topics={"sink1": "topicZ"},
        ... )
        >>> config.source_topic("s1")
        'topicA'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    namespace: str | None = Field(
        default=None,
        pattern=NAMESPACE_PATTERN,
        description="Kubernetes namespace of the pipeline",
    )
    brokers: list[str] = Field(
        ...,
        min_length=1,
        description="Kafka bootstrap addresses",
    )
    source_topics: dict[str, str] = Field(
        default_factory=dict,
        description="Source name -> Kafka topic",
    )
    sink_topics: dict[str, str] = Field(
        default_factory=dict,
        description="Sink name -> Kafka topic",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Tracing configuration",
    )
    processor: ProcessorDefaults = Field(
        default_factory=ProcessorDefaults,
        description="Processor container settings",
    )
    scaling: ScalingConfig = Field(
        default_factory=ScalingConfig,
        description="KEDA trigger parameters",
    )
    topics: TopicDefaults = Field(
        default_factory=TopicDefaults,
        description="Strimzi topic parameters",
    )
    broker: BrokerConfig = Field(
        default_factory=BrokerConfig,
        description="Dapr Kafka component settings",
    )

    @classmethod
    def from_yaml(cls, path: str | Path) -> DeploymentConfig:
        """Load DeploymentConfig from YAML file.

        Args:
            path: Path to the deployment.yaml file.

        Returns:
            Parsed and validated DeploymentConfig.

        Raises:
            FileNotFoundError: If file doesn't exist.
            yaml.YAMLError: If YAML syntax is invalid.
            pydantic.ValidationError: If schema validation fails.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Deployment config not found: {path}")

        with path.open("r") as f:
            data: dict[str, Any] | None = yaml.safe_load(f)

        return cls.model_validate(data or {})

    @classmethod
    def default(cls, namespace: str | None = None) -> DeploymentConfig:
        """Return the built-in single-cluster configuration.

        Targets the Strimzi ``my-cluster`` Kafka cluster with two ingress
        and two egress topics, each named after its source or sink.

        Args:
            namespace: Optional namespace override.

        Returns:
            DeploymentConfig with the built-in defaults.
        """
        return cls(
            namespace=namespace,
            brokers=[DEFAULT_BROKER],
            source_topics={
                "kafka-ingress-0": "kafka-ingress-0",
                "kafka-ingress-1": "kafka-ingress-1",
            },
            sink_topics={
                "kafka-egress-0": "kafka-egress-0",
                "kafka-egress-1": "kafka-egress-1",
            },
        )

    def for_pipeline(self, pipeline_name: str) -> DeploymentConfig:
        """Return a config whose namespace is set, defaulting to the pipeline name.

        Args:
            pipeline_name: Name of the pipeline being compiled.

        Returns:
            This instance if a namespace is already set, otherwise a
            validated copy with ``namespace=pipeline_name``.

        Raises:
            pydantic.ValidationError: If the pipeline name is not a valid namespace.
        """
        if self.namespace is not None:
            return self
        return self.model_validate({**self.model_dump(), "namespace": pipeline_name})

    @property
    def broker_list(self) -> str:
        """Comma-separated broker addresses, as Dapr and KEDA expect them."""
        return ",".join(self.brokers)

    def source_topic(self, name: str) -> str:
        """Get the topic consumed by a source.

        Args:
            name: Source name.

        Returns:
            The mapped, non-empty topic name.

        Raises:
            UnmappedTopicError: If no non-empty mapping exists.
        """
        topic = self.source_topics.get(name)
        if not topic:
            raise UnmappedTopicError(name, "source_topics", self.source_topics.keys())
        return topic

    def sink_topic(self, name: str) -> str:
        """Get the topic published by a sink.

        Args:
            name: Sink name.

        Returns:
            The mapped, non-empty topic name.

        Raises:
            UnmappedTopicError: If no non-empty mapping exists.
        """
        topic = self.sink_topics.get(name)
        if not topic:
            raise UnmappedTopicError(name, "sink_topics", self.sink_topics.keys())
        return topic
