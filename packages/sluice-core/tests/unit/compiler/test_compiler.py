"""Unit tests for the Compiler class."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError as PydanticValidationError

from sluice_core.compiler import Compiler, CompiledArtifacts
from sluice_core.compiler.models import ArtifactCategory
from sluice_core.errors import (
    CompilationError,
    CyclicGraphError,
    DuplicateNameError,
    InvalidEdgeError,
    MissingFieldError,
    UnknownComponentError,
    UnmappedTopicError,
)
from sluice_core.schemas import DeploymentConfig


class TestCompilerInit:
    """Target selection."""

    def test_default_target(self) -> None:
        assert Compiler().target == "dapr"

    def test_unsupported_target(self) -> None:
        with pytest.raises(CompilationError, match="Unsupported deployment target 'k8s'"):
            Compiler(target="k8s")


class TestPlan:
    """Ingest, validate and order without generating."""

    def test_order(self, chained_pipeline: dict[str, Any]) -> None:
        topology, order = Compiler().plan(chained_pipeline)
        assert order == ["s1", "proc1", "proc2", "sink1"]
        assert topology.input_of("proc2") == "proc1"

    def test_logs_order(
        self,
        linear_pipeline: dict[str, Any],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        Compiler().plan(linear_pipeline)
        assert "compilation_order_resolved" in capsys.readouterr().out

    def test_schema_error(self) -> None:
        with pytest.raises(PydanticValidationError):
            Compiler().plan({"name": "p1", "steps": "not-a-list"})

    def test_cycle(self) -> None:
        pipeline = {
            "name": "p1",
            "steps": [
                {"name": "s1", "kind": "source", "connectsTo": "proc1"},
                {"name": "proc1", "kind": "processor", "connectsTo": "proc2"},
                {"name": "proc2", "kind": "processor", "connectsTo": "proc1"},
            ],
        }
        with pytest.raises(CyclicGraphError):
            Compiler().plan(pipeline)


class TestCompileScenarios:
    """End-to-end compilation scenarios."""

    def test_single_processor(
        self,
        linear_pipeline: dict[str, Any],
        deployment_config: DeploymentConfig,
    ) -> None:
        """One binding per side, one workload triple, one tracing config."""
        result = Compiler().compile(linear_pipeline, deployment_config)

        assert isinstance(result, CompiledArtifacts)
        assert result.pipeline == "p1"
        assert result.namespace == "p1"
        assert result.order == ["s1", "proc1", "sink1"]
        assert [a.file_name for a in result.by_category(ArtifactCategory.BINDINGS)] == [
            "s1-proc1-binding.yaml",
            "sink1-binding.yaml",
        ]
        assert len(result.by_category("deployments")) == 2
        assert len(result.by_category("scaling")) == 1
        assert len(result.by_category("monitoring")) == 1
        assert result.by_category("streams") == []
        assert result.by_category("topics") == []

    def test_processor_chain(
        self,
        chained_pipeline: dict[str, Any],
        deployment_config: DeploymentConfig,
    ) -> None:
        """The proc1 -> proc2 edge yields one broker/subscription/topic triple."""
        result = Compiler().compile(chained_pipeline, deployment_config)

        streams = result.by_category("streams")
        topics = result.by_category("topics")
        assert len(streams) == 2
        assert [t.file_name for t in topics] == ["p1-proc1-stream.yaml"]
        assert "topic: p1-proc1-stream" in streams[1].content

    def test_unknown_connection(self, deployment_config: DeploymentConfig) -> None:
        pipeline = {
            "name": "p1",
            "steps": [
                {"name": "s1", "kind": "source", "connectsTo": "proc1"},
                {"name": "proc1", "kind": "processor", "connectsTo": "ghost"},
            ],
        }
        with pytest.raises((InvalidEdgeError, UnknownComponentError)):
            Compiler().compile(pipeline, deployment_config)

    def test_duplicate_name(self, deployment_config: DeploymentConfig) -> None:
        pipeline = {
            "name": "p1",
            "steps": [
                {"name": "s1", "kind": "source", "connectsTo": "proc1"},
                {"name": "s1", "kind": "processor", "connectsTo": "sink1"},
            ],
        }
        with pytest.raises(DuplicateNameError):
            Compiler().compile(pipeline, deployment_config)


class TestCompileBehavior:
    """Namespace resolution, determinism and failure handling."""

    def test_explicit_namespace(
        self,
        linear_pipeline: dict[str, Any],
        deployment_config_data: dict[str, Any],
    ) -> None:
        config = DeploymentConfig.model_validate({**deployment_config_data, "namespace": "prod"})
        result = Compiler().compile(linear_pipeline, config)

        assert result.namespace == "prod"
        assert "namespace: prod" in result.artifacts[0].content

    def test_deterministic(
        self,
        chained_pipeline: dict[str, Any],
        deployment_config: DeploymentConfig,
    ) -> None:
        first = Compiler().compile(chained_pipeline, deployment_config)
        second = Compiler().compile(chained_pipeline, deployment_config)

        assert first.artifacts == second.artifacts
        assert first.order == second.order

    def test_unmapped_topic_fails_whole_run(
        self,
        linear_pipeline: dict[str, Any],
    ) -> None:
        config = DeploymentConfig(brokers=["kafka:9092"], source_topics={"s1": "topicA"})
        with pytest.raises(UnmappedTopicError) as exc_info:
            Compiler().compile(linear_pipeline, config)
        assert exc_info.value.node_name == "sink1"

    def test_long_processor_chain(self, deployment_config: DeploymentConfig) -> None:
        processors = [f"p{i}" for i in range(1200)]
        names = ["s1", *processors, "sink1"]
        steps: list[dict[str, Any]] = [
            {"name": "s1", "kind": "source", "connectsTo": "p0"},
            *(
                {"name": name, "kind": "processor", "connectsTo": target}
                for name, target in zip(processors, names[2:])
            ),
            {"name": "sink1", "kind": "sink"},
        ]

        result = Compiler().compile({"name": "p1", "steps": steps}, deployment_config)

        assert result.order == names
        assert len(result.by_category("topics")) == len(processors) - 1

    def test_metadata(
        self,
        linear_pipeline: dict[str, Any],
        deployment_config: DeploymentConfig,
    ) -> None:
        result = Compiler().compile(linear_pipeline, deployment_config, source_hash="abc")
        assert result.metadata.sluice_version == "0.1.0"
        assert result.metadata.source_hash == "abc"
        assert result.metadata.compiled_at.tzinfo is not None


class TestCompileFile:
    """Compilation from files on disk."""

    def test_with_config(
        self,
        write_yaml: Any,
        linear_pipeline: dict[str, Any],
        deployment_config_data: dict[str, Any],
    ) -> None:
        spec_path = write_yaml(linear_pipeline, "pipeline.yaml")
        config_path = write_yaml(deployment_config_data, "deployment.yaml")

        result = Compiler().compile_file(spec_path, config_path)

        assert result.order == ["s1", "proc1", "sink1"]
        expected_hash = hashlib.sha256(spec_path.read_text().encode("utf-8")).hexdigest()
        assert result.metadata.source_hash == expected_hash

    def test_builtin_defaults(self, write_yaml: Any) -> None:
        pipeline = {
            "name": "p1",
            "steps": [
                {"name": "kafka-ingress-0", "kind": "source", "connectsTo": "proc1"},
                {"name": "proc1", "kind": "processor", "connectsTo": "kafka-egress-0"},
                {"name": "kafka-egress-0", "kind": "sink"},
            ],
        }
        result = Compiler().compile_file(write_yaml(pipeline, "pipeline.yaml"))

        assert "my-cluster-kafka-brokers.kafka:9092" in result.artifacts[0].content

    def test_loaded_config_wins(
        self,
        write_yaml: Any,
        linear_pipeline: dict[str, Any],
        deployment_config: DeploymentConfig,
        tmp_path: Path,
    ) -> None:
        result = Compiler().compile_file(
            write_yaml(linear_pipeline, "pipeline.yaml"),
            tmp_path / "missing.yaml",
            config=deployment_config,
        )
        assert len(result.artifacts) == 6

    def test_missing_spec(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            Compiler().compile_file(tmp_path / "pipeline.yaml")

    def test_empty_spec(self, tmp_path: Path) -> None:
        path = tmp_path / "pipeline.yaml"
        path.write_text("")
        with pytest.raises(MissingFieldError, match="Required field 'name' missing"):
            Compiler().compile_file(path)
