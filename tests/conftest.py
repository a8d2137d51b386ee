"""Pytest fixtures for cruxctl tests."""

import os
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from cruxctl.config import AgentConfig, ApiConfig, CruxConfig, ProfileConfig, StateConfig
from cruxctl.core.context import CruxContext
from cruxctl.core.output import OutputFormat
from cruxctl.deploy import DeploymentState, DeployService
from cruxctl.models import NodeStatus
from cruxctl.nodes import NodeRegistry, NodeService


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch) -> Generator[None, None, None]:
    """Isolate tests from the caller's environment and config files."""
    env_vars = [
        "CRUXCTL_API_URL",
        "CRUXCTL_API_TOKEN",
        "CRUX_URL",
        "CRUX_TOKEN",
        "CRUXCTL_AGENT_URL",
        "CRUXCTL_AGENT_TOKEN",
        "CRUXCTL_STATE_DIR",
        "CRUXCTL_IDENTITY",
        "CRUXCTL_PROFILE",
        "CRUXCTL_CONFIG",
    ]
    for k in env_vars:
        monkeypatch.delenv(k, raising=False)

    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("CRUXCTL_CONFIG_DIR", str(home))

    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)

    yield


@pytest.fixture
def state_dir(tmp_path) -> str:
    path = tmp_path / "state"
    path.mkdir()
    return str(path)


@pytest.fixture
def mock_config(state_dir: str) -> CruxConfig:
    """Create a configuration pointing at a temporary state dir."""
    return CruxConfig(
        profiles={
            "default": ProfileConfig(
                agent=AgentConfig(url="http://agent.test:5000", token="agent-token"),
                state=StateConfig(state_dir=state_dir),
                identity="tester",
            ),
            "remote": ProfileConfig(
                api=ApiConfig(url="https://crux.test", token="api-token"),
                state=StateConfig(state_dir=state_dir),
            ),
        }
    )


@pytest.fixture
def mock_context(mock_config: CruxConfig) -> CruxContext:
    """Create a mock cruxctl context."""
    return CruxContext(
        config=mock_config,
        profile="default",
        output_format=OutputFormat.JSON,
        verbose=0,
        quiet=False,
        dry_run=False,
        color=False,
    )


@pytest.fixture
def mock_agent() -> MagicMock:
    """Agent client double usable as a context manager."""
    agent = MagicMock()
    agent.__enter__.return_value = agent
    agent.get_secrets.return_value = {"publicKey": "pk", "keys": ["DB_PASSWORD"]}
    agent.get_container_states.return_value = []
    agent.get_deployment_status.return_value = {}
    return agent


@pytest.fixture
def node_service(state_dir: str, mock_agent: MagicMock) -> Generator[NodeService, None, None]:
    service = NodeService(NodeRegistry(state_dir), AgentConfig(url="http://agent.test:5000"))
    with patch.object(NodeService, "agent_for", return_value=mock_agent):
        yield service


@pytest.fixture
def deploy_service(state_dir: str, node_service: NodeService) -> DeployService:
    return DeployService(DeploymentState(state_dir), node_service)


@pytest.fixture
def docker_node(node_service: NodeService):
    """A registered docker node that is connected."""
    node = node_service.create_node("edge-1", "docker", "http://10.0.0.5:5000")
    node.status = NodeStatus.RUNNING
    node_service.registry.save(node)
    return node


@pytest.fixture
def create_request(docker_node) -> dict:
    return {
        "nodeId": docker_node.id,
        "prefix": "shop",
        "product": "shop",
        "version": "1.2.0",
        "note": "first rollout",
        "environment": {"LOG_LEVEL": "info"},
        "images": [
            {"name": "nginx", "tag": "1.25", "config": {"name": "web"}},
            {"name": "redis"},
        ],
    }
