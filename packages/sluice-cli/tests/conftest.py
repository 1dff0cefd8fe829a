"""Shared test fixtures for sluice-cli tests.

Provides CliRunner fixtures and helpers that place pipeline.yaml and
deployment.yaml in a temporary directory.
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from click.testing import CliRunner

if TYPE_CHECKING:
    from collections.abc import Callable

PIPELINE_YAML_FILENAME = "pipeline.yaml"
DEPLOYMENT_YAML_FILENAME = "deployment.yaml"


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    The working directory is a fresh temporary directory for the duration
    of the test.

    Yields:
        CliRunner instance with isolated filesystem.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def valid_pipeline_yaml(fixtures_dir: Path, tmp_path: Path) -> Path:
    """Copy the valid pipeline and its deployment config into tmp_path.

    Returns:
        Path to pipeline.yaml in tmp_path, with deployment.yaml alongside it.
    """
    pipeline = tmp_path / PIPELINE_YAML_FILENAME
    pipeline.write_text((fixtures_dir / "valid_pipeline.yaml").read_text())
    (tmp_path / DEPLOYMENT_YAML_FILENAME).write_text(
        (fixtures_dir / DEPLOYMENT_YAML_FILENAME).read_text()
    )
    return pipeline


@pytest.fixture
def invalid_pipeline_yaml(fixtures_dir: Path) -> Path:
    """Return the path to a pipeline whose source targets an unknown node."""
    return fixtures_dir / "invalid_pipeline.yaml"


@pytest.fixture
def create_file(isolated_runner: CliRunner) -> Callable[[str, str], Path]:
    """Factory fixture writing a file into the isolated filesystem.

    Args:
        isolated_runner: CliRunner with isolated filesystem.

    Returns:
        Function (content, filename) -> Path.
    """

    def _create(content: str, filename: str = PIPELINE_YAML_FILENAME) -> Path:
        path = Path(filename)
        path.write_text(content)
        return path

    return _create
