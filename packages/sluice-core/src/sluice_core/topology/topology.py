"""In-memory topology model for sluice.

The Topology is the compiler's intermediate representation: a pipeline
name and a single declaration-ordered mapping from node name to node.
Because every kind shares one mapping, a name can never be declared twice
under different kinds.

Lifecycle:
    1. Nodes are added while the pipeline spec is ingested.
    2. Once the full node set is known, ``register_inputs`` records on every
       processor and sink the node feeding it.
    3. The topology is only read afterwards (graph building, synthesis).
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

import structlog

from sluice_core.errors import (
    DuplicateNameError,
    InvalidEdgeError,
    MissingFieldError,
    UnknownComponentError,
    ValidationError,
)
from sluice_core.topology.models import (
    Node,
    NodeKind,
    ProcessorNode,
    SinkNode,
    SourceNode,
)

logger = structlog.get_logger(__name__)


class Topology:
    """A named graph of sources, processors and sinks.

    Attributes:
        name: Pipeline name.

    Example:
        >>> topology = Topology("p1")
        >>> topology.add_source("s1", "proc1")
        >>> topology.add_processor("proc1", "sink1", {"LOG_LEVEL": "info"})
        >>> topology.add_sink("sink1")
        >>> topology.kind_of("proc1")
        <NodeKind.PROCESSOR: 'processor'>
    """

    def __init__(self, name: str | None) -> None:
        """Initialize an empty topology.

        Args:
            name: Pipeline name.

        Raises:
            MissingFieldError: If name is absent or empty.
        """
        if not name:
            raise MissingFieldError("name")
        self.name = name
        self._nodes: dict[str, Node] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    @property
    def names(self) -> list[str]:
        """All node names, in declaration order."""
        return list(self._nodes)

    @property
    def sources(self) -> dict[str, SourceNode]:
        """Sources keyed by name, in declaration order."""
        return {n: node for n, node in self._nodes.items() if isinstance(node, SourceNode)}

    @property
    def processors(self) -> dict[str, ProcessorNode]:
        """Processors keyed by name, in declaration order."""
        return {n: node for n, node in self._nodes.items() if isinstance(node, ProcessorNode)}

    @property
    def sinks(self) -> dict[str, SinkNode]:
        """Sinks keyed by name, in declaration order."""
        return {n: node for n, node in self._nodes.items() if isinstance(node, SinkNode)}

    def add_source(self, name: str | None, connects_to: str | None) -> None:
        """Declare a source.

        Args:
            name: Unique node name.
            connects_to: Processor fed by this source.

        Raises:
            MissingFieldError: If name or connects_to is absent.
            DuplicateNameError: If name is already declared.
        """
        if not name:
            raise MissingFieldError("name")
        if not connects_to:
            raise MissingFieldError("connectsTo", node_name=name)
        self._add(SourceNode(name=name, connects_to=connects_to))

    def add_processor(
        self,
        name: str | None,
        connects_to: str | None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Declare a processor.

        Args:
            name: Unique node name.
            connects_to: Processor or sink receiving this processor's output.
            env: Optional ordered environment mapping.

        Raises:
            MissingFieldError: If name or connects_to is absent.
            DuplicateNameError: If name is already declared.
        """
        if not name:
            raise MissingFieldError("name")
        if not connects_to:
            raise MissingFieldError("connectsTo", node_name=name)
        self._add(ProcessorNode(name=name, connects_to=connects_to, env=dict(env or {})))

    def add_sink(self, name: str | None) -> None:
        """Declare a sink.

        Args:
            name: Unique node name.

        Raises:
            MissingFieldError: If name is absent.
            DuplicateNameError: If name is already declared.
        """
        if not name:
            raise MissingFieldError("name")
        self._add(SinkNode(name=name))

    def _add(self, node: Node) -> None:
        existing = self._nodes.get(node.name)
        if existing is not None:
            raise DuplicateNameError(node.name, existing.kind.value)
        self._nodes[node.name] = node

    def kind_of(self, name: str) -> NodeKind | None:
        """Return the kind of a declared node, or None if it is not declared."""
        node = self._nodes.get(name)
        return node.kind if node is not None else None

    def node(self, name: str) -> Node:
        """Look up a node by name alone.

        Raises:
            UnknownComponentError: If no node with that name exists.
        """
        node = self._nodes.get(name)
        if node is None:
            raise UnknownComponentError(name, "node")
        return node

    def get(self, name: str, kind: NodeKind | str) -> Node:
        """Look up a node by name and kind.

        Args:
            name: Node name.
            kind: Expected node kind.

        Returns:
            The declared node.

        Raises:
            InvalidKindError: If kind is outside {source, processor, sink}.
            UnknownComponentError: If no node with that name and kind exists.
        """
        kind = NodeKind.parse(kind)
        node = self._nodes.get(name)
        if node is None or node.kind is not kind:
            raise UnknownComponentError(name, kind.value)
        return node

    def register_input(
        self,
        source_name: str,
        dest_name: str,
        dest_kind: NodeKind | str,
    ) -> None:
        """Record that ``source_name`` feeds ``dest_name``.

        Processors accept exactly one input. Sinks accept any number of
        producers. Sources accept none.

        Args:
            source_name: Upstream node name.
            dest_name: Downstream node name.
            dest_kind: Kind of the downstream node.

        Raises:
            InvalidKindError: If dest_kind is outside the known kinds.
            UnknownComponentError: If no node matches (dest_name, dest_kind).
            InvalidEdgeError: If the destination is a source.
            ValidationError: If a processor already has a different input.
        """
        dest = self.get(dest_name, dest_kind)

        if isinstance(dest, ProcessorNode):
            if dest.input is not None and dest.input != source_name:
                raise ValidationError(
                    f"Processor '{dest_name}' is fed by both '{dest.input}' and "
                    f"'{source_name}'; a processor accepts a single input"
                )
            self._nodes[dest_name] = dest.model_copy(update={"input": source_name})
        elif isinstance(dest, SinkNode):
            if source_name not in dest.inputs:
                self._nodes[dest_name] = dest.model_copy(
                    update={"inputs": (*dest.inputs, source_name)}
                )
        else:
            raise InvalidEdgeError(source_name, dest_name, "processor or sink")

    def register_inputs(self) -> None:
        """Register the input of every node reached by a ``connects_to`` edge.

        Runs once after all nodes are declared and the edges validated.

        Raises:
            UnknownComponentError: If a connection targets an undeclared node.
            InvalidEdgeError: If a connection targets a source.
            ValidationError: If a processor would receive two inputs.
        """
        for node in list(self._nodes.values()):
            if isinstance(node, SinkNode):
                continue
            target_kind = self.kind_of(node.connects_to)
            if target_kind is None:
                raise UnknownComponentError(node.connects_to, "node")
            self.register_input(node.name, node.connects_to, target_kind)

        logger.debug(
            "inputs_registered",
            pipeline=self.name,
            processors={n: p.input for n, p in self.processors.items()},
        )

    def input_of(self, name: str) -> str | None:
        """Return the registered input of a processor, or None."""
        node = self._nodes.get(name)
        if isinstance(node, ProcessorNode):
            return node.input
        return None
