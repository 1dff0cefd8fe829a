"""Shared pytest fixtures for sluice-core tests.

Provides structlog configuration plus sample pipeline and deployment
documents used across the unit tests.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest
import structlog
import yaml


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    capsys can then assert on log events emitted by the compiler.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


@pytest.fixture
def linear_pipeline() -> dict[str, Any]:
    """Return a source -> processor -> sink pipeline.

    Returns:
        Dictionary representing pipeline.yaml for pipeline "p1".
    """
    return {
        "name": "p1",
        "steps": [
            {"name": "s1", "kind": "source", "connectsTo": "proc1"},
            {
                "name": "proc1",
                "kind": "processor",
                "connectsTo": "sink1",
                "env": [{"name": "LOG_LEVEL", "value": "info"}],
            },
            {"name": "sink1", "kind": "sink"},
        ],
    }


@pytest.fixture
def chained_pipeline() -> dict[str, Any]:
    """Return a pipeline with an inter-processor edge.

    s1 -> proc1 -> proc2 -> sink1, declared out of order.
    """
    return {
        "name": "p1",
        "steps": [
            {"name": "sink1", "kind": "sink"},
            {"name": "proc2", "kind": "processor", "connectsTo": "sink1"},
            {"name": "s1", "kind": "source", "connectsTo": "proc1"},
            {"name": "proc1", "kind": "processor", "connectsTo": "proc2"},
        ],
    }


@pytest.fixture
def deployment_config_data() -> dict[str, Any]:
    """Return a deployment.yaml mapping matching the sample pipelines.

    Returns:
        Dictionary representing deployment.yaml.
    """
    return {
        "brokers": ["kafka:9092"],
        "source_topics": {"s1": "topicA"},
        "sink_topics": {"sink1": "topicZ"},
    }


@pytest.fixture
def deployment_config(deployment_config_data: dict[str, Any]) -> Any:
    """Return a validated DeploymentConfig without a namespace."""
    from sluice_core.schemas import DeploymentConfig

    return DeploymentConfig.model_validate(deployment_config_data)


@pytest.fixture
def write_yaml(tmp_path: Path) -> Any:
    """Factory fixture writing a mapping as YAML under tmp_path.

    Returns:
        Function (data, filename) -> Path.
    """

    def _write(data: dict[str, Any], filename: str) -> Path:
        path = tmp_path / filename
        path.write_text(yaml.safe_dump(data, sort_keys=False))
        return path

    return _write
