"""Directed graph projection and compilation ordering for sluice.

This module builds a plain vertex/adjacency view of a Topology from its
``connects_to`` edges, validates edge legality and computes the
compilation order.

Edge rules:
    - source    -> processor
    - processor -> processor | sink
    - sinks have no outgoing edges

Ordering:
    Depth-first search with three marks per vertex (unvisited, in progress,
    done). Reaching a vertex that is still in progress means the graph has a
    cycle. The compilation order is the reverse of the completion order, so
    every edge's origin precedes its target. Vertices and adjacency lists are
    walked in declaration order, which makes the order deterministic.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum

import structlog

from sluice_core.errors import CyclicGraphError, InvalidEdgeError
from sluice_core.topology.topology import Topology

logger = structlog.get_logger(__name__)


class TopologyDiGraph:
    """Vertex set plus ordered successor lists.

    A structural projection of a Topology, not its source of truth.

    Attributes:
        nodes: Vertex names in insertion order.
        adjacency: Vertex name -> ordered successor names.
    """

    def __init__(self) -> None:
        self.nodes: list[str] = []
        self.adjacency: dict[str, list[str]] = {}

    def add_node(self, name: str) -> None:
        """Add a vertex. Adding an existing vertex is a no-op."""
        if name in self.adjacency:
            return
        self.nodes.append(name)
        self.adjacency[name] = []

    def add_edge(self, src: str, dst: str) -> None:
        """Add a directed edge between two existing vertices.

        Raises:
            KeyError: If either endpoint is not a vertex.
        """
        for vertex in (src, dst):
            if vertex not in self.adjacency:
                raise KeyError(f"Unknown vertex: {vertex}")
        self.adjacency[src].append(dst)

    def successors(self, name: str) -> list[str]:
        """Return the successors of a vertex, in insertion order."""
        return list(self.adjacency[name])

    def edges(self) -> Iterator[tuple[str, str]]:
        """Iterate over all (origin, target) edges."""
        for src in self.nodes:
            for dst in self.adjacency[src]:
                yield src, dst


class _Mark(Enum):
    UNVISITED = 0
    IN_PROGRESS = 1
    DONE = 2


def build_topology_graph(topology: Topology) -> TopologyDiGraph:
    """Project a Topology onto a directed graph, validating every edge.

    Args:
        topology: Fully declared topology.

    Returns:
        Graph with one vertex per node and one edge per ``connects_to``.

    Raises:
        InvalidEdgeError: If a source does not connect to a declared
            processor, or a processor does not connect to a declared
            processor or sink.
    """
    graph = TopologyDiGraph()
    for name in topology.names:
        graph.add_node(name)

    processors = topology.processors
    sinks = topology.sinks

    for name, source in topology.sources.items():
        if source.connects_to not in processors:
            raise InvalidEdgeError(name, source.connects_to, "processor")
        graph.add_edge(name, source.connects_to)

    for name, processor in processors.items():
        target = processor.connects_to
        if target not in processors and target not in sinks:
            raise InvalidEdgeError(name, target, "processor or sink")
        graph.add_edge(name, target)

    logger.debug("topology_graph_built", pipeline=topology.name, nodes=graph.nodes)
    return graph


def topological_sort(graph: TopologyDiGraph) -> list[str]:
    """Compute a deterministic topological order of the graph.

    Args:
        graph: Graph to order.

    Returns:
        All vertices, each edge's origin before its target.

    Raises:
        CyclicGraphError: If the graph contains a cycle (including a self-loop).
    """
    marks = dict.fromkeys(graph.nodes, _Mark.UNVISITED)
    finished: list[str] = []

    for root in graph.nodes:
        if marks[root] is not _Mark.UNVISITED:
            continue
        marks[root] = _Mark.IN_PROGRESS
        # Frames are (vertex, remaining successors)
        stack: list[tuple[str, Iterator[str]]] = [(root, iter(graph.adjacency[root]))]
        while stack:
            node, successors = stack[-1]
            successor = next(successors, None)
            if successor is None:
                stack.pop()
                marks[node] = _Mark.DONE
                finished.append(node)
            elif marks[successor] is _Mark.IN_PROGRESS:
                raise CyclicGraphError(successor)
            elif marks[successor] is _Mark.UNVISITED:
                marks[successor] = _Mark.IN_PROGRESS
                stack.append((successor, iter(graph.adjacency[successor])))

    return finished[::-1]
