"""Node management and container operations."""

from typing import Any

from cruxctl.clients.agent import AgentClient
from cruxctl.config import AgentConfig
from cruxctl.core.exceptions import ValidationError
from cruxctl.core.logging import StructuredLogger
from cruxctl.core.utils import is_uuid, is_valid_prefix, utcnow
from cruxctl.mappers import (
    connection_status_to_display,
    container_state_to_display,
    node_type_to_display,
    node_type_to_protocol,
    operation_to_protocol,
)
from cruxctl.models import NodeStatus, NodeType
from cruxctl.nodes.models import Node
from cruxctl.nodes.registry import NodeRegistry
from cruxctl.proto import ContainerCommandRequest, ContainerOperation, NodeEventMessage

logger = StructuredLogger(__name__)


def validate_node_id(node_id: str) -> None:
    if not is_uuid(node_id):
        raise ValidationError(f"Invalid node id: {node_id}")


class NodeService:
    """Registers nodes and talks to their agents."""

    def __init__(self, registry: NodeRegistry, agent_config: AgentConfig | None = None):
        self._registry = registry
        self._agent_config = agent_config or AgentConfig()

    @property
    def registry(self) -> NodeRegistry:
        return self._registry

    def agent_for(self, node: Node) -> AgentClient:
        """Agent client for a node; the node address wins over the configured URL."""
        return AgentClient(self._agent_config, url=node.address)

    def list_nodes(self) -> list[dict[str, Any]]:
        return [n.to_dto() for n in self._registry.list()]

    def get_node(self, node_id: str) -> Node:
        validate_node_id(node_id)
        return self._registry.get(node_id)

    def create_node(self, name: str, node_type: str, address: str | None = None) -> Node:
        """Register a node. It stays unreachable until its agent reports in."""
        if not name:
            raise ValidationError("Node name is required")
        if self._registry.find_by_name(name):
            raise ValidationError(f"Node name already taken: {name}")

        # Normalise through the protocol enum so only the two known types are stored
        display_type = node_type_to_display(node_type_to_protocol(node_type))
        if display_type != node_type:
            raise ValidationError(f"Unknown node type: {node_type}")

        node = Node(name=name, type=NodeType(display_type), address=address)
        self._registry.save(node)
        logger.info("Registered node", id=node.id, name=name, type=display_type)
        return node

    def delete_node(self, node_id: str) -> None:
        validate_node_id(node_id)
        self._registry.get(node_id)
        self._registry.delete(node_id)

    def apply_node_event(self, event: NodeEventMessage) -> Node:
        """Update a node from an agent status event."""
        node = self._registry.get(event.id)
        status = NodeStatus(connection_status_to_display(event.status))

        if status == NodeStatus.RUNNING and not node.is_running:
            node.connected_at = utcnow()
        node.status = status
        if event.address:
            node.address = event.address
        if event.version:
            node.version = event.version

        self._registry.save(node)
        logger.debug("Applied node event", id=node.id, status=status.value)
        return node

    def refresh_node(self, node_id: str) -> Node:
        """Poll the node's agent and apply the reported status."""
        node = self.get_node(node_id)
        with self.agent_for(node) as agent:
            event = agent.get_status()
        # Agents may not know the id they were registered under
        event.id = node.id
        return self.apply_node_event(event)

    def container_command(self, node_id: str, prefix: str, name: str, operation: str) -> ContainerOperation:
        """Send start/stop/restart for one container to the node's agent."""
        node = self.get_node(node_id)

        proto_operation = operation_to_protocol(operation)
        if proto_operation == ContainerOperation.UNRECOGNIZED:
            raise ValidationError(f"Unknown container operation: {operation}")
        if not is_valid_prefix(prefix):
            raise ValidationError(f"Invalid prefix: {prefix}")

        request = ContainerCommandRequest(prefix=prefix, name=name, operation=proto_operation)
        with self.agent_for(node) as agent:
            agent.send_container_command(request)

        logger.info("Container command sent", node=node.name, prefix=prefix, name=name, operation=operation)
        return proto_operation

    def container_states(self, node_id: str, prefix: str) -> list[dict[str, Any]]:
        """Current container states under a prefix, in display form."""
        node = self.get_node(node_id)
        with self.agent_for(node) as agent:
            items = agent.get_container_states(prefix)

        return [
            {
                "prefix": item.prefix,
                "name": item.name,
                "state": container_state_to_display(item.state),
                "status": item.status,
                "image": f"{item.image_name}:{item.image_tag}" if item.image_name else "",
            }
            for item in items
        ]
