"""Pipeline spec ingestion for sluice.

Populates a Topology from a validated PipelineSpec, one step at a time,
in declaration order. Duplicate names, missing fields and unknown kinds
are rejected here, before any graph is built.
"""

from __future__ import annotations

import structlog

from sluice_core.errors import MissingFieldError, ValidationError
from sluice_core.schemas.pipeline_spec import PipelineSpec
from sluice_core.topology import NodeKind, Topology

logger = structlog.get_logger(__name__)


def topology_from_spec(spec: PipelineSpec) -> Topology:
    """Build a Topology from a pipeline spec.

    Args:
        spec: Parsed pipeline.yaml.

    Returns:
        Topology holding every declared step. Inputs are not registered yet.

    Raises:
        MissingFieldError: If the pipeline name, the step list, or a
            required step attribute is absent.
        InvalidKindError: If a step kind is not source, processor or sink.
        DuplicateNameError: If two steps share a name.
        ValidationError: If a sink declares a connection.
    """
    topology = Topology(spec.name)

    if spec.steps is None:
        raise MissingFieldError("steps", node_name=spec.name)

    for step in spec.steps:
        if step.kind is None:
            raise MissingFieldError("kind", node_name=step.name)
        kind = NodeKind.parse(step.kind)

        if kind is not NodeKind.PROCESSOR and step.env:
            logger.warning(
                "step_env_ignored",
                step=step.name,
                kind=kind.value,
            )

        if kind is NodeKind.SOURCE:
            topology.add_source(step.name, step.connects_to)
        elif kind is NodeKind.PROCESSOR:
            env = {entry.name: entry.value for entry in step.env}
            topology.add_processor(step.name, step.connects_to, env)
        else:
            if step.connects_to is not None:
                raise ValidationError(
                    f"Sink '{step.name}' cannot connect to '{step.connects_to}': "
                    "sinks have no outgoing connection"
                )
            topology.add_sink(step.name)

    logger.debug(
        "topology_ingested",
        pipeline=topology.name,
        sources=len(topology.sources),
        processors=len(topology.processors),
        sinks=len(topology.sinks),
    )
    return topology
