"""Topology model and graph validation for sluice.

This module exports:
- Topology: Named mapping of declared nodes (the compiler's IR)
- NodeKind, SourceNode, ProcessorNode, SinkNode: Node variants
- TopologyDiGraph: Vertex/adjacency projection of a Topology
- build_topology_graph: Build and validate the graph
- topological_sort: Deterministic compilation order with cycle detection
"""

from __future__ import annotations

from sluice_core.topology.graph import (
    TopologyDiGraph,
    build_topology_graph,
    topological_sort,
)
from sluice_core.topology.models import (
    Node,
    NodeKind,
    ProcessorNode,
    SinkNode,
    SourceNode,
)
from sluice_core.topology.topology import Topology

__all__: list[str] = [
    "Topology",
    "Node",
    "NodeKind",
    "SourceNode",
    "ProcessorNode",
    "SinkNode",
    "TopologyDiGraph",
    "build_topology_graph",
    "topological_sort",
]
