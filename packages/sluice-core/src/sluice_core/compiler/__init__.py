"""Compiler module for sluice.

This module exports the Compiler class, the Dapr generator and the
output models:
- Compiler: Main compiler class (ingest, validate, order, synthesize)
- topology_from_spec: Pipeline spec ingestion
- DaprGenerator: Dapr/KEDA/Strimzi manifest generator
- write_artifacts: Write artifacts to an output directory
- CompiledArtifacts: Output contract model
- Artifact, ArtifactCategory: One generated manifest and its category
- ArtifactMetadata: Compilation metadata model
"""

from __future__ import annotations

from sluice_core.compiler.compiler import (
    SLUICE_CORE_VERSION,
    SUPPORTED_TARGETS,
    Compiler,
)
from sluice_core.compiler.dapr_generator import (
    DAPR_TARGET,
    DaprGenerator,
    DaprProcessor,
    DaprSink,
    DaprSource,
    DaprTracingConfig,
)
from sluice_core.compiler.ingest import topology_from_spec
from sluice_core.compiler.models import (
    Artifact,
    ArtifactCategory,
    ArtifactMetadata,
    CompiledArtifacts,
)
from sluice_core.compiler.writer import write_artifacts

__all__: list[str] = [
    # Compiler class
    "Compiler",
    "SLUICE_CORE_VERSION",
    "SUPPORTED_TARGETS",
    # Front-end
    "topology_from_spec",
    # Dapr target
    "DAPR_TARGET",
    "DaprGenerator",
    "DaprSource",
    "DaprSink",
    "DaprProcessor",
    "DaprTracingConfig",
    # Emission
    "write_artifacts",
    # Output models
    "CompiledArtifacts",
    "Artifact",
    "ArtifactCategory",
    "ArtifactMetadata",
]
