"""Topology node models for sluice.

A topology node is one of three tagged variants:
- SourceNode: reads an external Kafka topic and feeds one processor
- ProcessorNode: a containerized transformation step
- SinkNode: publishes to an external Kafka topic

Nodes are immutable. Registering an input replaces the node in its
Topology with an updated copy.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from sluice_core.errors import InvalidKindError


class NodeKind(str, Enum):
    """Closed set of node kinds.

    Values:
        SOURCE: Entry point reading an external topic.
        PROCESSOR: Transformation step, deployed as a workload.
        SINK: Exit point publishing to an external topic.
    """

    SOURCE = "source"
    PROCESSOR = "processor"
    SINK = "sink"

    @classmethod
    def parse(cls, value: object) -> NodeKind:
        """Convert a raw kind value to a NodeKind.

        Args:
            value: Raw kind, usually a string from pipeline.yaml.

        Returns:
            The matching NodeKind.

        Raises:
            InvalidKindError: If value is not one of the known kinds.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidKindError(value, [kind.value for kind in cls]) from None


class SourceNode(BaseModel):
    """A pipeline entry point.

    Attributes:
        name: Unique node name.
        connects_to: Processor this source feeds.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal[NodeKind.SOURCE] = NodeKind.SOURCE
    name: str = Field(..., min_length=1)
    connects_to: str = Field(..., min_length=1)


class ProcessorNode(BaseModel):
    """A transformation step.

    Attributes:
        name: Unique node name.
        connects_to: Processor or sink receiving this processor's output.
        input: Name of the node feeding this processor. Set once by
            ``Topology.register_input``; a lookup aid, not ownership.
        env: Ordered environment mapping passed to the container.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal[NodeKind.PROCESSOR] = NodeKind.PROCESSOR
    name: str = Field(..., min_length=1)
    connects_to: str = Field(..., min_length=1)
    input: str | None = None
    env: dict[str, str] = Field(default_factory=dict)


class SinkNode(BaseModel):
    """A pipeline exit point.

    A sink may be fed by several processors; all of them are recorded.

    Attributes:
        name: Unique node name.
        inputs: Names of the processors publishing to this sink.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal[NodeKind.SINK] = NodeKind.SINK
    name: str = Field(..., min_length=1)
    inputs: tuple[str, ...] = ()


Node = Annotated[
    Union[SourceNode, ProcessorNode, SinkNode],
    Field(discriminator="kind"),
]
