"""Compiler output models for sluice.

This module defines the output contract produced by the Compiler:
- Artifact: One rendered manifest with its output category and file name
- ArtifactMetadata: Provenance of a compilation run
- CompiledArtifacts: The ordered, immutable result of a compilation run

Artifact content only depends on the pipeline spec and the deployment
configuration, so compiling the same inputs twice yields identical
artifacts. Run-specific data (timestamp) lives in ArtifactMetadata only.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import PurePosixPath

from pydantic import BaseModel, ConfigDict, Field


class ArtifactCategory(str, Enum):
    """Output sub-directory of an artifact.

    Values:
        BINDINGS: Dapr input/output Kafka bindings.
        DEPLOYMENTS: Processor Services and Deployments.
        SCALING: KEDA ScaledObjects.
        STREAMS: Dapr pubsub brokers and Subscriptions.
        TOPICS: Strimzi KafkaTopics.
        MONITORING: Dapr tracing Configuration.
    """

    BINDINGS = "bindings"
    DEPLOYMENTS = "deployments"
    SCALING = "scaling"
    STREAMS = "streams"
    TOPICS = "topics"
    MONITORING = "monitoring"


class Artifact(BaseModel):
    """One generated manifest.

    Attributes:
        category: Output category (sub-directory).
        file_name: File name within the category directory.
        content: Fully rendered YAML text.

    Example:
        >>> artifact = Artifact(
        ...     category=ArtifactCategory.BINDINGS,
        ...     file_name="sink1-binding.yaml",
        ...     content="apiVersion: dapr.io/v1alpha1\\n",
        ... )
        >>> str(artifact.relative_path)
        'bindings/sink1-binding.yaml'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    category: ArtifactCategory = Field(
        ...,
        description="Output category (sub-directory)",
    )
    file_name: str = Field(
        ...,
        min_length=1,
        pattern=r"^[^/\\]+$",
        description="File name within the category directory",
    )
    content: str = Field(
        ...,
        description="Rendered YAML text",
    )

    @property
    def relative_path(self) -> PurePosixPath:
        """Path of the artifact relative to the output root."""
        return PurePosixPath(self.category.value, self.file_name)


class ArtifactMetadata(BaseModel):
    """Compilation metadata for tracking artifact provenance.

    Attributes:
        compiled_at: Timestamp when compilation occurred (UTC).
        sluice_version: Version of sluice-core that produced the artifacts.
        source_hash: SHA-256 hash of the source pipeline.yaml content, if
            compiled from a file.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    compiled_at: datetime = Field(
        ...,
        description="Timestamp when compilation occurred (UTC)",
    )
    sluice_version: str = Field(
        ...,
        min_length=1,
        description="Version of sluice-core that produced artifacts",
    )
    source_hash: str | None = Field(
        default=None,
        description="SHA-256 hash of source pipeline.yaml content",
    )


class CompiledArtifacts(BaseModel):
    """Immutable output of one compilation run.

    Attributes:
        pipeline: Pipeline name.
        namespace: Kubernetes namespace the manifests target.
        target: Deployment target the manifests were generated for.
        order: Compilation order of the topology nodes.
        artifacts: Generated manifests, in generation order.
        metadata: Compilation metadata.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    pipeline: str = Field(..., min_length=1, description="Pipeline name")
    namespace: str = Field(..., min_length=1, description="Target namespace")
    target: str = Field(..., min_length=1, description="Deployment target")
    order: list[str] = Field(..., description="Compilation order")
    artifacts: list[Artifact] = Field(..., description="Generated manifests")
    metadata: ArtifactMetadata = Field(..., description="Compilation metadata")

    def by_category(self, category: ArtifactCategory | str) -> list[Artifact]:
        """Return the artifacts of one category, in generation order."""
        category = ArtifactCategory(category)
        return [a for a in self.artifacts if a.category is category]

    def file_names(self) -> list[str]:
        """Return every artifact file name, in generation order."""
        return [a.file_name for a in self.artifacts]
