"""Dapr manifest generator for sluice.

Topology-to-Dapr translation layer. Turns every topology node, in
compilation order, into the Kubernetes objects that realize it on a
Kafka-backed Dapr mesh autoscaled by KEDA.

Per node kind:
    source    -> one Dapr input binding per subscribing processor
    sink      -> one Dapr output binding (shared by all producers)
    processor -> Service + Deployment + KEDA ScaledObject, plus, when fed
                 by another processor, a dedicated pubsub broker, a
                 Subscription and a Strimzi KafkaTopic for that edge
    (global)  -> one tracing Configuration

Addressing between neighbors is derived from the naming helpers below so
that both ends of an edge agree on binding names, routes, topics and
consumer groups.

Every inter-processor edge gets its own broker and consumer group, and
every source one input binding per subscriber. KEDA scales each processor
on the lag of its own consumer group.
"""

from __future__ import annotations

from typing import Any

import structlog
import yaml

from sluice_core.compiler.models import Artifact, ArtifactCategory
from sluice_core.errors import InvalidInputKindError, InvalidOutputKindError
from sluice_core.schemas.deployment_config import DeploymentConfig
from sluice_core.topology import (
    NodeKind,
    ProcessorNode,
    SinkNode,
    SourceNode,
    Topology,
)

logger = structlog.get_logger(__name__)

DAPR_TARGET = "dapr"

# Dapr sidecar HTTP API, as seen from the application container
DAPR_HTTP_API = "http://localhost:3500/v1.0"

DAPR_COMPONENT_API = "dapr.io/v1alpha1"
KEDA_API = "keda.sh/v1alpha1"
STRIMZI_API = "kafka.strimzi.io/v1beta1"


# =============================================================================
# Naming helpers
# =============================================================================


def consumer_group(namespace: str, processor: str) -> str:
    """Kafka consumer group of the processor consuming an edge."""
    return f"{namespace}-{processor}-grp"


def ingress_binding_name(source: str, subscriber: str) -> str:
    """Name of the input binding delivering a source's topic to one subscriber."""
    return f"{source}-{subscriber}-binding"


def egress_binding_name(sink: str) -> str:
    """Name of the output binding publishing to a sink's topic."""
    return f"{sink}-binding"


def stream_topic(namespace: str, producer: str) -> str:
    """Topic carrying a processor's output to the next processor."""
    return f"{namespace}-{producer}-stream"


def pubsub_name(consumer: str) -> str:
    """Name of the dedicated pubsub broker of the processor consuming an edge."""
    return f"kafka-broker-{consumer}"


def render_manifest(manifest: dict[str, Any]) -> str:
    """Serialize a manifest dict to YAML, preserving key order."""
    return yaml.safe_dump(manifest, sort_keys=False, default_flow_style=False)


def _flag(value: bool) -> str:
    return "true" if value else "false"


# =============================================================================
# Components
# =============================================================================


class DaprSource:
    """Generation-scoped view of a source.

    Attributes:
        namespace: Target namespace.
        name: Source name.
        topic: Kafka topic read by the source.
        subscribers: Processors fed by the source.
    """

    def __init__(self, source: SourceNode, config: DeploymentConfig) -> None:
        self.namespace = config.namespace
        self.brokers = config.broker_list
        self.auth_required = config.broker.auth_required
        self.name = source.name
        self.topic = config.source_topic(source.name)
        self.subscribers: list[str] = [source.connects_to]

    def artifacts(self) -> list[Artifact]:
        """One input binding per subscriber."""
        artifacts: list[Artifact] = []
        for subscriber in self.subscribers:
            binding = ingress_binding_name(self.name, subscriber)
            manifest = {
                "apiVersion": DAPR_COMPONENT_API,
                "kind": "Component",
                "metadata": {"name": binding, "namespace": self.namespace},
                "spec": {
                    "type": "bindings.kafka",
                    "version": "v1",
                    "metadata": [
                        {"name": "brokers", "value": self.brokers},
                        {"name": "authRequired", "value": _flag(self.auth_required)},
                        {"name": "topics", "value": self.topic},
                        {
                            "name": "consumerGroup",
                            "value": consumer_group(self.namespace, subscriber),
                        },
                    ],
                },
            }
            artifacts.append(
                Artifact(
                    category=ArtifactCategory.BINDINGS,
                    file_name=f"{binding}.yaml",
                    content=render_manifest(manifest),
                )
            )
        return artifacts


class DaprSink:
    """Generation-scoped view of a sink.

    A single output binding serves every processor publishing to the sink.
    """

    def __init__(self, sink: SinkNode, config: DeploymentConfig) -> None:
        self.namespace = config.namespace
        self.brokers = config.broker_list
        self.auth_required = config.broker.auth_required
        self.name = sink.name
        self.topic = config.sink_topic(sink.name)

    @property
    def component_name(self) -> str:
        return egress_binding_name(self.name)

    def artifacts(self) -> list[Artifact]:
        manifest = {
            "apiVersion": DAPR_COMPONENT_API,
            "kind": "Component",
            "metadata": {"name": self.component_name, "namespace": self.namespace},
            "spec": {
                "type": "bindings.kafka",
                "version": "v1",
                "metadata": [
                    {"name": "brokers", "value": self.brokers},
                    {"name": "authRequired", "value": _flag(self.auth_required)},
                    {"name": "publishTopic", "value": self.topic},
                ],
            },
        }
        return [
            Artifact(
                category=ArtifactCategory.BINDINGS,
                file_name=f"{self.component_name}.yaml",
                content=render_manifest(manifest),
            )
        ]


class DaprProcessor:
    """Generation-scoped view of a processor.

    Holds the addressing state derived from the processor's neighbors. The
    environment mapping is copied from the node, so wiring flags never leak
    back into the topology.

    A processor needs:
    1. A Service and a Deployment carrying its input and output routes as
       environment variables, with Dapr sidecar annotations.
    2. A KEDA ScaledObject driven by the lag on its input topic.
    3. When fed by another processor: a dedicated pubsub broker (own
       consumer group), a Subscription routing the producer's stream topic
       to this processor, and the KafkaTopic itself.
    """

    def __init__(self, processor: ProcessorNode, config: DeploymentConfig) -> None:
        self.namespace = config.namespace
        self.name = processor.name
        self.env: dict[str, str] = dict(processor.env)
        self.input_topic: str | None = None
        self.is_input_from_processor = False

    def register_input(
        self,
        input_name: str | None,
        input_kind: NodeKind | None,
        config: DeploymentConfig,
    ) -> None:
        """Wire the processor to its predecessor.

        Args:
            input_name: Predecessor node name.
            input_kind: Predecessor node kind.
            config: Deployment configuration.

        Raises:
            InvalidInputKindError: If the predecessor is not a source or processor.
            UnmappedTopicError: If a source predecessor has no topic mapping.
        """
        if input_name is not None and input_kind is NodeKind.SOURCE:
            self.env["IS_SOURCE"] = "true"
            self.env["INPUT_ROUTE"] = f"/{ingress_binding_name(input_name, self.name)}"
            self.input_topic = config.source_topic(input_name)
        elif input_name is not None and input_kind is NodeKind.PROCESSOR:
            self.env["IS_SOURCE"] = "false"
            self.env["INPUT_ROUTE"] = f"/{self.name}"
            self.input_topic = stream_topic(self.namespace, input_name)
            self.is_input_from_processor = True
        else:
            raise InvalidInputKindError(
                self.name, input_name, input_kind.value if input_kind else None
            )

    def register_output(
        self,
        output_name: str,
        output_kind: NodeKind | None,
        config: DeploymentConfig,
    ) -> None:
        """Wire the processor to its successor.

        Args:
            output_name: Successor node name.
            output_kind: Successor node kind.
            config: Deployment configuration.

        Raises:
            InvalidOutputKindError: If the successor is not a sink or processor.
            UnmappedTopicError: If a sink successor has no topic mapping.
        """
        if output_kind is NodeKind.SINK:
            config.sink_topic(output_name)
            self.env["IS_SINK"] = "true"
            self.env["OUTPUT_ROUTE"] = (
                f"{DAPR_HTTP_API}/bindings/{egress_binding_name(output_name)}"
            )
        elif output_kind is NodeKind.PROCESSOR:
            topic = stream_topic(self.namespace, self.name)
            self.env["IS_SINK"] = "false"
            self.env["OUTPUT_ROUTE"] = (
                f"{DAPR_HTTP_API}/publish/{pubsub_name(output_name)}/{topic}"
            )
        else:
            raise InvalidOutputKindError(
                self.name, output_name, output_kind.value if output_kind else None
            )

    def artifacts(self, config: DeploymentConfig) -> list[Artifact]:
        """Render the processor's manifests.

        Args:
            config: Deployment configuration.

        Returns:
            Service, Deployment and ScaledObject, followed by broker,
            Subscription and KafkaTopic when fed by another processor.
        """
        artifacts = [
            self._service(config),
            self._deployment(config),
            self._scaler(config),
        ]
        if self.is_input_from_processor:
            artifacts.extend(
                [
                    self._broker(config),
                    self._subscription(),
                    self._topic(config),
                ]
            )
        return artifacts

    def _service(self, config: DeploymentConfig) -> Artifact:
        manifest = {
            "kind": "Service",
            "apiVersion": "v1",
            "metadata": {
                "name": self.name,
                "namespace": self.namespace,
                "labels": {"app": self.name},
            },
            "spec": {
                "selector": {"app": self.name},
                "ports": [
                    {
                        "protocol": "TCP",
                        "port": config.processor.service_port,
                        "targetPort": config.processor.app_port,
                    }
                ],
                "type": config.processor.service_type,
            },
        }
        return Artifact(
            category=ArtifactCategory.DEPLOYMENTS,
            file_name=f"{self.name}-service.yaml",
            content=render_manifest(manifest),
        )

    def _deployment(self, config: DeploymentConfig) -> Artifact:
        defaults = config.processor
        manifest = {
            "apiVersion": "apps/v1",
            "kind": "Deployment",
            "metadata": {
                "name": self.name,
                "namespace": self.namespace,
                "labels": {"app": self.name},
            },
            "spec": {
                "replicas": defaults.replicas,
                "selector": {"matchLabels": {"app": self.name}},
                "template": {
                    "metadata": {
                        "labels": {"app": self.name},
                        "annotations": {
                            "dapr.io/enabled": "true",
                            "dapr.io/app-id": self.name,
                            "dapr.io/app-port": str(defaults.app_port),
                            "dapr.io/config": config.observability.config_name,
                        },
                    },
                    "spec": {
                        "containers": [
                            {
                                "name": self.name,
                                "image": defaults.image,
                                "ports": [{"containerPort": defaults.app_port}],
                                "imagePullPolicy": defaults.image_pull_policy,
                                "env": [
                                    {"name": key, "value": value}
                                    for key, value in self.env.items()
                                ],
                            }
                        ]
                    },
                },
            },
        }
        return Artifact(
            category=ArtifactCategory.DEPLOYMENTS,
            file_name=f"{self.name}-deploy.yaml",
            content=render_manifest(manifest),
        )

    def _scaler(self, config: DeploymentConfig) -> Artifact:
        scaling = config.scaling
        manifest = {
            "apiVersion": KEDA_API,
            "kind": "ScaledObject",
            "metadata": {
                "name": f"{self.namespace}-{self.name}-scaler",
                "namespace": self.namespace,
            },
            "spec": {
                "scaleTargetRef": {"kind": "Deployment", "name": self.name},
                "pollingInterval": scaling.polling_interval,
                "maxReplicaCount": scaling.max_replicas,
                "minReplicaCount": scaling.min_replicas,
                "triggers": [
                    {
                        "type": "kafka",
                        "metadata": {
                            "topic": self.input_topic,
                            "bootstrapServers": config.broker_list,
                            "consumerGroup": consumer_group(self.namespace, self.name),
                            "lagThreshold": str(scaling.lag_threshold),
                        },
                    }
                ],
            },
        }
        return Artifact(
            category=ArtifactCategory.SCALING,
            file_name=f"{self.name}-scaler.yaml",
            content=render_manifest(manifest),
        )

    def _broker(self, config: DeploymentConfig) -> Artifact:
        name = pubsub_name(self.name)
        manifest = {
            "apiVersion": DAPR_COMPONENT_API,
            "kind": "Component",
            "metadata": {"name": name, "namespace": self.namespace},
            "spec": {
                "type": "pubsub.kafka",
                "version": "v1",
                "metadata": [
                    {"name": "brokers", "value": config.broker_list},
                    {"name": "authRequired", "value": _flag(config.broker.auth_required)},
                    {"name": "maxMessageBytes", "value": config.broker.max_message_bytes},
                    {"name": "consumerID", "value": consumer_group(self.namespace, self.name)},
                ],
            },
        }
        return Artifact(
            category=ArtifactCategory.STREAMS,
            file_name=f"{name}.yaml",
            content=render_manifest(manifest),
        )

    def _subscription(self) -> Artifact:
        name = f"{self.input_topic}-{self.name}-subscription"
        manifest = {
            "apiVersion": DAPR_COMPONENT_API,
            "kind": "Subscription",
            "metadata": {"name": name, "namespace": self.namespace},
            "spec": {
                "topic": self.input_topic,
                "route": f"/{self.name}",
                "pubsubname": pubsub_name(self.name),
            },
            "scopes": [self.name],
        }
        return Artifact(
            category=ArtifactCategory.STREAMS,
            file_name=f"{name}.yaml",
            content=render_manifest(manifest),
        )

    def _topic(self, config: DeploymentConfig) -> Artifact:
        topics = config.topics
        manifest = {
            "apiVersion": STRIMZI_API,
            "kind": "KafkaTopic",
            "metadata": {
                "name": self.input_topic,
                "namespace": topics.namespace,
                "labels": {"strimzi.io/cluster": topics.cluster},
            },
            "spec": {
                "partitions": topics.partitions,
                "replicas": topics.replicas,
                "config": {
                    "retention.ms": topics.retention_ms,
                    "segment.bytes": topics.segment_bytes,
                },
            },
        }
        return Artifact(
            category=ArtifactCategory.TOPICS,
            file_name=f"{self.input_topic}.yaml",
            content=render_manifest(manifest),
        )


class DaprTracingConfig:
    """The mesh-wide tracing Configuration, emitted once per pipeline."""

    def __init__(self, config: DeploymentConfig) -> None:
        self.namespace = config.namespace
        self.name = config.observability.config_name
        self.tracing_endpoint = config.observability.tracing_endpoint
        self.sampling_rate = config.observability.sampling_rate_str

    def artifacts(self) -> list[Artifact]:
        manifest = {
            "apiVersion": DAPR_COMPONENT_API,
            "kind": "Configuration",
            "metadata": {"name": self.name, "namespace": self.namespace},
            "spec": {
                "tracing": {
                    "samplingRate": self.sampling_rate,
                    "zipkin": {"endpointAddress": self.tracing_endpoint},
                }
            },
        }
        return [
            Artifact(
                category=ArtifactCategory.MONITORING,
                file_name=f"{self.name}.yaml",
                content=render_manifest(manifest),
            )
        ]


# =============================================================================
# Generator
# =============================================================================


class DaprGenerator:
    """Generate Dapr, KEDA and Strimzi manifests for a validated topology.

    Example:
        >>> generator = DaprGenerator(config)
        >>> artifacts = generator.generate(topology, order)
    """

    target = DAPR_TARGET

    def __init__(self, config: DeploymentConfig) -> None:
        """Initialize the generator.

        Args:
            config: Deployment configuration with its namespace resolved.

        Raises:
            ValueError: If the configuration has no namespace.
        """
        if config.namespace is None:
            raise ValueError("DeploymentConfig.namespace must be resolved before generation")
        self.config = config

    def generate(self, topology: Topology, order: list[str]) -> list[Artifact]:
        """Synthesize all artifacts, node by node in compilation order.

        Args:
            topology: Topology with inputs registered. Not modified.
            order: Compilation order from ``topological_sort``.

        Returns:
            Artifacts of every node in ``order``, then the tracing configuration.

        Raises:
            InvalidInputKindError: If a processor has no valid predecessor.
            InvalidOutputKindError: If a processor has no valid successor.
            UnmappedTopicError: If a source or sink has no topic mapping.
        """
        artifacts: list[Artifact] = []
        for name in order:
            node = topology.node(name)
            if isinstance(node, SourceNode):
                artifacts.extend(self._generate_source(node))
            elif isinstance(node, ProcessorNode):
                artifacts.extend(self._generate_processor(node, topology))
            else:
                artifacts.extend(self._generate_sink(node))

        artifacts.extend(DaprTracingConfig(self.config).artifacts())

        logger.info(
            "artifacts_synthesized",
            pipeline=topology.name,
            target=self.target,
            count=len(artifacts),
        )
        return artifacts

    def _generate_source(self, source: SourceNode) -> list[Artifact]:
        return DaprSource(source, self.config).artifacts()

    def _generate_sink(self, sink: SinkNode) -> list[Artifact]:
        return DaprSink(sink, self.config).artifacts()

    def _generate_processor(
        self,
        processor: ProcessorNode,
        topology: Topology,
    ) -> list[Artifact]:
        component = DaprProcessor(processor, self.config)
        component.register_output(
            processor.connects_to,
            topology.kind_of(processor.connects_to),
            self.config,
        )
        input_name = topology.input_of(processor.name)
        component.register_input(
            input_name,
            topology.kind_of(input_name) if input_name is not None else None,
            self.config,
        )
        return component.artifacts(self.config)
