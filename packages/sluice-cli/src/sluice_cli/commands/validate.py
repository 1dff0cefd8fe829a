"""sluice validate command - Check a pipeline graph without generating manifests."""

from __future__ import annotations

from pathlib import Path

import click

from sluice_cli.output import print_order, success


@click.command()
@click.option(
    "-f",
    "--file",
    "file_path",
    type=click.Path(exists=False),
    default="./pipeline.yaml",
    help="Path to pipeline.yaml [default: ./pipeline.yaml]",
)
def validate(file_path: str) -> None:
    """Validate pipeline.yaml.

    Checks step declarations, connection rules and acyclicity, then
    prints the order in which nodes would be compiled.

    Examples:

        sluice validate

        sluice validate --file path/to/pipeline.yaml
    """
    import yaml
    from pydantic import ValidationError as PydanticValidationError
    from sluice_core import Compiler, PipelineSpec, SluiceError

    from sluice_cli.errors import (
        handle_file_not_found,
        handle_sluice_error,
        handle_validation_error,
        handle_yaml_error,
    )

    path = Path(file_path)
    if not path.exists():
        handle_file_not_found(file_path)

    try:
        spec = PipelineSpec.from_yaml(path)
        topology, order = Compiler().plan(spec)
    except yaml.YAMLError as e:
        handle_yaml_error(e, file_path)
    except PydanticValidationError as e:
        handle_validation_error(e, file_path)
    except SluiceError as e:
        handle_sluice_error(e, "Validation")

    kinds = {name: topology.node(name).kind.value for name in order}
    print_order(order, kinds)
    success(f"Pipeline '{topology.name}' valid")
