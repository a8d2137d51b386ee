"""Tests for node registration and container operations."""

import json
import uuid

import pytest

from cruxctl.core.exceptions import CruxError, NotFoundError, ValidationError
from cruxctl.models import NodeStatus, NodeType
from cruxctl.nodes import Node, NodeRegistry
from cruxctl.proto import (
    ContainerCommandRequest,
    ContainerOperation,
    ContainerState,
    ContainerStateItem,
    NodeConnectionStatus,
    NodeEventMessage,
)


class TestNodeRegistry:
    """Tests for NodeRegistry."""

    def test_empty(self, state_dir):
        assert NodeRegistry(state_dir).list() == []

    def test_save_and_get(self, state_dir):
        registry = NodeRegistry(state_dir)
        node = Node(name="edge-1", type=NodeType.K8S, address="http://10.0.0.5:5000")
        registry.save(node)

        loaded = registry.get(node.id)
        assert loaded.name == "edge-1"
        assert loaded.type == NodeType.K8S
        assert loaded.status == NodeStatus.UNREACHABLE

    def test_list_sorted_by_name(self, state_dir):
        registry = NodeRegistry(state_dir)
        registry.save(Node(name="zeta"))
        registry.save(Node(name="alpha"))

        assert [n.name for n in registry.list()] == ["alpha", "zeta"]

    def test_get_missing(self, state_dir):
        with pytest.raises(NotFoundError):
            NodeRegistry(state_dir).get(str(uuid.uuid4()))

    def test_delete(self, state_dir):
        registry = NodeRegistry(state_dir)
        node = Node(name="edge-1")
        registry.save(node)
        registry.delete(node.id)

        assert registry.find_by_name("edge-1") is None

    def test_corrupt_file(self, state_dir, tmp_path):
        (tmp_path / "state" / "nodes.json").write_text("{not json")
        with pytest.raises(CruxError):
            NodeRegistry(state_dir).list()

    def test_file_format(self, state_dir, tmp_path):
        NodeRegistry(state_dir).save(Node(name="edge-1"))
        data = json.loads((tmp_path / "state" / "nodes.json").read_text())
        assert data["nodes"][0]["name"] == "edge-1"
        assert data["nodes"][0]["type"] == "docker"


class TestCreateNode:
    """Tests for NodeService.create_node."""

    @pytest.mark.parametrize("node_type", ["docker", "k8s"])
    def test_known_types(self, node_service, node_type):
        node = node_service.create_node("edge-1", node_type)
        assert node.type == NodeType(node_type)
        assert node.status == NodeStatus.UNREACHABLE

    @pytest.mark.parametrize("node_type", ["podman", "", "DOCKER"])
    def test_unknown_type_rejected(self, node_service, node_type):
        with pytest.raises(ValidationError):
            node_service.create_node("edge-1", node_type)
        assert node_service.list_nodes() == []

    def test_duplicate_name(self, node_service):
        node_service.create_node("edge-1", "docker")
        with pytest.raises(ValidationError):
            node_service.create_node("edge-1", "k8s")

    def test_delete_node(self, node_service):
        node = node_service.create_node("edge-1", "docker")
        node_service.delete_node(node.id)
        assert node_service.list_nodes() == []

    def test_invalid_id(self, node_service):
        with pytest.raises(ValidationError):
            node_service.get_node("edge-1")


class TestNodeEvents:
    """Tests for applying agent status events."""

    def test_connected_is_running(self, node_service):
        node = node_service.create_node("edge-1", "docker")
        event = NodeEventMessage(
            id=node.id, status=NodeConnectionStatus.CONNECTED, address="http://10.0.0.9:5000", version="0.3.1"
        )

        updated = node_service.apply_node_event(event)

        assert updated.status == NodeStatus.RUNNING
        assert updated.connected_at is not None
        assert updated.address == "http://10.0.0.9:5000"
        assert node_service.list_nodes()[0]["version"] == "0.3.1"

    @pytest.mark.parametrize(
        "status",
        [NodeConnectionStatus.UNREACHABLE, NodeConnectionStatus.CONNECTION_STATUS_UNSPECIFIED, 99],
    )
    def test_anything_else_is_unreachable(self, node_service, docker_node, status):
        updated = node_service.apply_node_event(NodeEventMessage(id=docker_node.id, status=status))
        assert updated.status == NodeStatus.UNREACHABLE

    def test_connected_at_only_set_on_transition(self, node_service, docker_node):
        event = NodeEventMessage(id=docker_node.id, status=NodeConnectionStatus.CONNECTED)
        first = node_service.apply_node_event(event)
        assert first.connected_at is None

    def test_refresh_polls_agent(self, node_service, docker_node, mock_agent):
        mock_agent.get_status.return_value = NodeEventMessage(id="", status=NodeConnectionStatus.UNREACHABLE)

        node = node_service.refresh_node(docker_node.id)

        mock_agent.get_status.assert_called_once()
        assert node.id == docker_node.id
        assert node.status == NodeStatus.UNREACHABLE


class TestContainerCommands:
    """Tests for container operations sent to agents."""

    @pytest.mark.parametrize(
        "operation,expected",
        [
            ("start", ContainerOperation.START_CONTAINER),
            ("stop", ContainerOperation.STOP_CONTAINER),
            ("restart", ContainerOperation.RESTART_CONTAINER),
        ],
    )
    def test_operation_sent(self, node_service, docker_node, mock_agent, operation, expected):
        result = node_service.container_command(docker_node.id, "shop", "web", operation)

        assert result == expected
        request = mock_agent.send_container_command.call_args.args[0]
        assert request == ContainerCommandRequest(prefix="shop", name="web", operation=expected)
        assert request.to_dict()["operation"] == int(expected)

    def test_unknown_operation_not_sent(self, node_service, docker_node, mock_agent):
        with pytest.raises(ValidationError):
            node_service.container_command(docker_node.id, "shop", "web", "pause")
        mock_agent.send_container_command.assert_not_called()

    def test_invalid_prefix(self, node_service, docker_node, mock_agent):
        with pytest.raises(ValidationError):
            node_service.container_command(docker_node.id, "Shop", "web", "start")
        mock_agent.send_container_command.assert_not_called()

    def test_container_states(self, node_service, docker_node, mock_agent):
        mock_agent.get_container_states.return_value = [
            ContainerStateItem(
                prefix="shop", name="web", state=ContainerState.RUNNING, image_name="nginx", image_tag="1.25"
            ),
            ContainerStateItem(prefix="shop", name="redis", state=ContainerState.CONTAINER_STATE_UNSPECIFIED),
        ]

        states = node_service.container_states(docker_node.id, "shop")

        mock_agent.get_container_states.assert_called_once_with("shop")
        assert [(s["name"], s["state"], s["image"]) for s in states] == [
            ("web", "running", "nginx:1.25"),
            ("redis", "container_state_unspecified", ""),
        ]
