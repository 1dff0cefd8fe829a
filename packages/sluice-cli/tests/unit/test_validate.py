"""Tests for the sluice validate command."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from click.testing import CliRunner

from sluice_cli.commands.validate import validate


class TestValidateCommand:
    """Tests for validate command."""

    def test_valid_file(self, cli_runner: CliRunner, valid_pipeline_yaml: Path) -> None:
        result = cli_runner.invoke(validate, ["--file", str(valid_pipeline_yaml)])

        assert result.exit_code == 0
        assert "valid" in result.output.lower()
        assert "proc2" in result.output

    def test_unknown_connection(
        self,
        cli_runner: CliRunner,
        invalid_pipeline_yaml: Path,
    ) -> None:
        result = cli_runner.invoke(validate, ["--file", str(invalid_pipeline_yaml)])

        assert result.exit_code == 1
        assert "InvalidEdgeError" in result.output

    def test_missing_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(validate, ["--file", str(tmp_path / "nonexistent.yaml")])

        assert result.exit_code == 2
        assert "not found" in result.output.lower()

    def test_default_path(self, isolated_runner: CliRunner) -> None:
        """Without --file, ./pipeline.yaml is used."""
        result = isolated_runner.invoke(validate)

        assert result.exit_code == 2
        assert "not found" in result.output.lower()


class TestValidateErrors:
    """Structural and syntax errors exit with code 1."""

    def test_yaml_syntax_error(
        self,
        isolated_runner: CliRunner,
        create_file: Callable[..., Path],
    ) -> None:
        create_file("name: p1\nsteps: [\n")

        result = isolated_runner.invoke(validate)

        assert result.exit_code == 1
        assert "YAML" in result.output

    def test_schema_error(
        self,
        isolated_runner: CliRunner,
        create_file: Callable[..., Path],
    ) -> None:
        create_file("name: p1\nsteps:\n  - name: s1\n    colour: blue\n")

        result = isolated_runner.invoke(validate)

        assert result.exit_code == 1
        assert "colour" in result.output

    def test_invalid_step_name(
        self,
        isolated_runner: CliRunner,
        create_file: Callable[..., Path],
    ) -> None:
        create_file("name: p1\nsteps:\n  - {name: s/1, kind: source, connectsTo: proc1}\n")

        result = isolated_runner.invoke(validate)

        assert result.exit_code == 1
        assert "steps.0.name" in result.output
        assert "Step name 's/1'" in result.output

    def test_cycle(
        self,
        isolated_runner: CliRunner,
        create_file: Callable[..., Path],
    ) -> None:
        create_file(
            "name: p1\n"
            "steps:\n"
            "  - {name: s1, kind: source, connectsTo: a}\n"
            "  - {name: a, kind: processor, connectsTo: b}\n"
            "  - {name: b, kind: processor, connectsTo: a}\n"
        )

        result = isolated_runner.invoke(validate)

        assert result.exit_code == 1
        assert "CyclicGraphError" in result.output

    def test_duplicate_name(
        self,
        isolated_runner: CliRunner,
        create_file: Callable[..., Path],
    ) -> None:
        create_file(
            "name: p1\n"
            "steps:\n"
            "  - {name: a, kind: sink}\n"
            "  - {name: a, kind: sink}\n"
        )

        result = isolated_runner.invoke(validate)

        assert result.exit_code == 1
        assert "DuplicateNameError" in result.output
