"""Node and container enum mappers.

Every function here is total: unknown or future protocol values fall back to a
fixed default instead of raising, so callers keep working when the agent side
adds enum members. Raw wire values (ints, strings) are accepted as well as enum
members.
"""

from typing import Any

from cruxctl.models import NODE_TYPE_VALUES, ContainerOperation, NodeStatus
from cruxctl.proto import (
    ContainerOperation as ProtoContainerOperation,
    NodeConnectionStatus,
    NodeType as ProtoNodeType,
    container_state_to_json,
)


def container_state_to_display(state: Any) -> str:
    """Lowercased protocol name of a container state, e.g. ``running``."""
    return container_state_to_json(state).lower()


def node_type_to_display(node_type: Any) -> str:
    """DOCKER maps to the first node type, anything else to the second."""
    if node_type == ProtoNodeType.DOCKER:
        return NODE_TYPE_VALUES[0]
    return NODE_TYPE_VALUES[1]


def node_type_to_protocol(node_type: Any) -> ProtoNodeType:
    """Inverse of :func:`node_type_to_display`."""
    if node_type == NODE_TYPE_VALUES[0]:
        return ProtoNodeType.DOCKER
    return ProtoNodeType.K8S


def connection_status_to_display(status: Any) -> str:
    """Only CONNECTED is ``running``; everything else is ``unreachable``."""
    if status == NodeConnectionStatus.CONNECTED:
        return NodeStatus.RUNNING.value
    return NodeStatus.UNREACHABLE.value


def operation_to_protocol(operation: Any) -> ProtoContainerOperation:
    """Map start/stop/restart to the protocol operation, else UNRECOGNIZED."""
    if operation == ContainerOperation.START:
        return ProtoContainerOperation.START_CONTAINER
    if operation == ContainerOperation.STOP:
        return ProtoContainerOperation.STOP_CONTAINER
    if operation == ContainerOperation.RESTART:
        return ProtoContainerOperation.RESTART_CONTAINER
    return ProtoContainerOperation.UNRECOGNIZED
