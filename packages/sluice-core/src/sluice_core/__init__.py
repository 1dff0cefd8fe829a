"""sluice-core: Topology model and manifest compiler for sluice.

This package provides:
- PipelineSpec: Pydantic schema for pipeline.yaml
- DeploymentConfig: Pydantic schema for deployment.yaml
- Topology: In-memory pipeline graph with connectivity rules
- Compiler: Transform PipelineSpec + DeploymentConfig -> CompiledArtifacts
- write_artifacts: Emit artifacts to an output directory
"""

from __future__ import annotations

__version__ = "0.1.0"

# Compiler and output models
from sluice_core.compiler import (
    Artifact,
    ArtifactCategory,
    ArtifactMetadata,
    CompiledArtifacts,
    Compiler,
    write_artifacts,
)

# Error types
from sluice_core.errors import (
    CompilationError,
    ConfigurationError,
    CyclicGraphError,
    DuplicateNameError,
    InvalidEdgeError,
    InvalidInputKindError,
    InvalidKindError,
    InvalidOutputKindError,
    MissingFieldError,
    SluiceError,
    UnknownComponentError,
    UnmappedTopicError,
    ValidationError,
)

# Schema models
from sluice_core.schemas import (
    DeploymentConfig,
    ObservabilityConfig,
    PipelineSpec,
    StepSpec,
)

# Topology
from sluice_core.topology import (
    NodeKind,
    Topology,
    TopologyDiGraph,
    build_topology_graph,
    topological_sort,
)

__all__ = [
    "__version__",
    # Compiler
    "Compiler",
    "CompiledArtifacts",
    "Artifact",
    "ArtifactCategory",
    "ArtifactMetadata",
    "write_artifacts",
    # Errors
    "SluiceError",
    "ValidationError",
    "CompilationError",
    "ConfigurationError",
    "MissingFieldError",
    "DuplicateNameError",
    "UnknownComponentError",
    "InvalidKindError",
    "InvalidEdgeError",
    "CyclicGraphError",
    "InvalidInputKindError",
    "InvalidOutputKindError",
    "UnmappedTopicError",
    # Schema models
    "PipelineSpec",
    "StepSpec",
    "DeploymentConfig",
    "ObservabilityConfig",
    # Topology
    "Topology",
    "NodeKind",
    "TopologyDiGraph",
    "build_topology_graph",
    "topological_sort",
]
