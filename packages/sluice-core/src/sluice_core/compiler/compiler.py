"""Compiler class for sluice.

This module implements the Compiler that transforms a PipelineSpec
(pipeline.yaml) plus a DeploymentConfig (deployment.yaml) into
CompiledArtifacts:

    ingest      PipelineSpec -> Topology
    validate    Topology -> TopologyDiGraph (edge rules)
    order       TopologyDiGraph -> compilation order (cycle detection)
    wire        register every node's input
    synthesize  Topology + order + DeploymentConfig -> Artifacts

Compilation is synchronous and all-or-nothing: any error aborts the run
before a single artifact is returned.
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import structlog
import yaml

from sluice_core.compiler.dapr_generator import DAPR_TARGET, DaprGenerator
from sluice_core.compiler.ingest import topology_from_spec
from sluice_core.compiler.models import ArtifactMetadata, CompiledArtifacts
from sluice_core.errors import CompilationError
from sluice_core.schemas import DeploymentConfig, PipelineSpec
from sluice_core.topology import Topology, build_topology_graph, topological_sort

logger = structlog.get_logger(__name__)

# Package version - kept in sync with pyproject.toml
SLUICE_CORE_VERSION = "0.1.0"

SUPPORTED_TARGETS = (DAPR_TARGET,)


class Compiler:
    """Compile pipeline.yaml + deployment.yaml to CompiledArtifacts.

    Only one deployment target is active per compiler; "dapr" is the only
    target available.

    Example:
        >>> compiler = Compiler()
        >>> artifacts = compiler.compile_file("pipeline.yaml", "deployment.yaml")
        >>> artifacts.order
        ['s1', 'proc1', 'sink1']
    """

    def __init__(self, target: str = DAPR_TARGET) -> None:
        """Initialize the Compiler.

        Args:
            target: Deployment target to generate manifests for.

        Raises:
            CompilationError: If the target is not supported.
        """
        if target not in SUPPORTED_TARGETS:
            raise CompilationError(
                f"Unsupported deployment target '{target}'. "
                f"Available: {', '.join(SUPPORTED_TARGETS)}"
            )
        self.target = target

    def plan(self, spec: PipelineSpec | Mapping[str, Any]) -> tuple[Topology, list[str]]:
        """Ingest, validate and order a pipeline without generating anything.

        Args:
            spec: PipelineSpec, or the raw mapping parsed from pipeline.yaml.

        Returns:
            The wired Topology and its compilation order.

        Raises:
            ValidationError: If the pipeline is structurally invalid
                (missing fields, duplicate names, bad kinds or edges, cycles).
            pydantic.ValidationError: If a raw mapping does not match the schema.
        """
        if not isinstance(spec, PipelineSpec):
            spec = PipelineSpec.model_validate(spec)

        topology = topology_from_spec(spec)
        graph = build_topology_graph(topology)
        order = topological_sort(graph)
        topology.register_inputs()

        logger.info(
            "compilation_order_resolved",
            pipeline=topology.name,
            declared=graph.nodes,
            order=order,
        )
        return topology, order

    def compile(
        self,
        spec: PipelineSpec | Mapping[str, Any],
        config: DeploymentConfig,
        *,
        source_hash: str | None = None,
    ) -> CompiledArtifacts:
        """Compile a pipeline spec to CompiledArtifacts.

        Args:
            spec: PipelineSpec, or the raw mapping parsed from pipeline.yaml.
            config: Deployment configuration. When it has no namespace the
                pipeline name is used.
            source_hash: Optional hash of the source text, recorded in metadata.

        Returns:
            Immutable CompiledArtifacts.

        Raises:
            ValidationError: If the pipeline is structurally invalid.
            CompilationError: If a processor cannot be wired.
            UnmappedTopicError: If a source or sink has no topic mapping.
        """
        topology, order = self.plan(spec)
        config = config.for_pipeline(topology.name)

        artifacts = DaprGenerator(config).generate(topology, order)

        return CompiledArtifacts(
            pipeline=topology.name,
            namespace=config.namespace,
            target=self.target,
            order=order,
            artifacts=artifacts,
            metadata=ArtifactMetadata(
                compiled_at=datetime.now(timezone.utc),
                sluice_version=SLUICE_CORE_VERSION,
                source_hash=source_hash,
            ),
        )

    def compile_file(
        self,
        spec_path: Path | str,
        config_path: Path | str | None = None,
        *,
        config: DeploymentConfig | None = None,
    ) -> CompiledArtifacts:
        """Compile pipeline.yaml (and optionally deployment.yaml) from disk.

        Args:
            spec_path: Path to pipeline.yaml.
            config_path: Path to deployment.yaml.
            config: Already loaded deployment configuration. Takes precedence
                over ``config_path``. When neither is given the built-in
                ``DeploymentConfig.default()`` is used.

        Returns:
            Immutable CompiledArtifacts.

        Raises:
            FileNotFoundError: If an input file does not exist.
            yaml.YAMLError: If YAML is invalid.
            pydantic.ValidationError: If a document fails schema validation.
            SluiceError: If compilation fails.
        """
        spec_path = Path(spec_path)
        if not spec_path.exists():
            raise FileNotFoundError(f"File not found: {spec_path}")

        source_content = spec_path.read_text()
        raw_data: dict[str, Any] | None = yaml.safe_load(source_content)
        spec = PipelineSpec.model_validate(raw_data or {})

        if config is None:
            if config_path is not None:
                config = DeploymentConfig.from_yaml(config_path)
            else:
                config = DeploymentConfig.default()

        return self.compile(spec, config, source_hash=self._compute_hash(source_content))

    def _compute_hash(self, content: str) -> str:
        """Compute SHA-256 hash of content.

        Args:
            content: String content to hash.

        Returns:
            Hex-encoded SHA-256 hash.
        """
        return hashlib.sha256(content.encode("utf-8")).hexdigest()
