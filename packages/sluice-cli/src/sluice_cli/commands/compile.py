"""sluice compile command - Generate deployment manifests."""

from __future__ import annotations

from pathlib import Path

import click
from click.core import ParameterSource

from sluice_cli.output import info, print_order, success, warning


@click.command("compile")
@click.option(
    "-f",
    "--file",
    "file_path",
    type=click.Path(exists=False),
    default="./pipeline.yaml",
    help="Path to pipeline.yaml [default: ./pipeline.yaml]",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=False),
    default="./deployment.yaml",
    help="Path to deployment.yaml [default: ./deployment.yaml]",
)
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    default="./build",
    help="Output directory [default: ./build]",
)
@click.option(
    "-t",
    "--target",
    "target",
    type=str,
    default="dapr",
    help="Deployment target [default: dapr]",
)
@click.pass_context
def compile_cmd(
    ctx: click.Context,
    file_path: str,
    config_path: str,
    output_path: str,
    target: str,
) -> None:
    """Compile pipeline.yaml into Kubernetes manifests.

    Manifests are written to OUTPUT/bindings, OUTPUT/deployments,
    OUTPUT/scaling, OUTPUT/streams, OUTPUT/topics and OUTPUT/monitoring.
    Nothing is written when compilation fails. When --config is not given
    and ./deployment.yaml does not exist, built-in defaults are used.

    Examples:

        sluice compile

        sluice compile --file pipelines/orders.yaml --output build/orders

        sluice compile --config deployment.prod.yaml
    """
    # Import here to avoid heavy imports at CLI startup
    import yaml
    from pydantic import ValidationError as PydanticValidationError
    from sluice_core import Compiler, DeploymentConfig, SluiceError, write_artifacts

    from sluice_cli.errors import (
        handle_file_not_found,
        handle_sluice_error,
        handle_validation_error,
        handle_write_error,
        handle_yaml_error,
    )

    path = Path(file_path)
    if not path.exists():
        handle_file_not_found(file_path)

    config_file = Path(config_path)
    config_given = ctx.get_parameter_source("config_path") is not ParameterSource.DEFAULT
    if config_given and not config_file.exists():
        handle_file_not_found(config_path, option="--config")

    try:
        if config_file.exists():
            config = DeploymentConfig.from_yaml(config_file)
        else:
            warning(f"No deployment config at {config_path}, using built-in defaults")
            config = DeploymentConfig.default()
    except yaml.YAMLError as e:
        handle_yaml_error(e, config_path)
    except PydanticValidationError as e:
        handle_validation_error(e, config_path)

    try:
        compiler = Compiler(target=target)
        compiled = compiler.compile_file(path, config=config)
    except yaml.YAMLError as e:
        handle_yaml_error(e, file_path)
    except PydanticValidationError as e:
        handle_validation_error(e, file_path)
    except SluiceError as e:
        handle_sluice_error(e, "Compilation")

    try:
        written = write_artifacts(compiled.artifacts, Path(output_path))
    except OSError as e:
        handle_write_error(e, output_path)

    print_order(compiled.order)
    info(f"Namespace: {compiled.namespace}")
    success(f"Compiled {len(written)} manifests to {output_path}")
