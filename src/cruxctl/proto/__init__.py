"""Protocol enumerations and messages shared with node agents.

Values mirror the interface-definition schema used on the wire: every enum is
integer coded, ``0`` is the unspecified member and ``-1`` stands for values this
side does not know about.
"""

from cruxctl.proto.common import (
    ContainerOperation,
    ContainerState,
    ContainerStateItem,
    container_operation_from_json,
    container_operation_to_json,
    container_state_from_json,
    container_state_to_json,
)
from cruxctl.proto.crux import (
    ContainerCommandRequest,
    NodeConnectionStatus,
    NodeEventMessage,
    NodeType,
    node_connection_status_from_json,
    node_connection_status_to_json,
    node_type_from_json,
    node_type_to_json,
)

__all__ = [
    "ContainerCommandRequest",
    "ContainerOperation",
    "ContainerState",
    "ContainerStateItem",
    "NodeConnectionStatus",
    "NodeEventMessage",
    "NodeType",
    "container_operation_from_json",
    "container_operation_to_json",
    "container_state_from_json",
    "container_state_to_json",
    "node_connection_status_from_json",
    "node_connection_status_to_json",
    "node_type_from_json",
    "node_type_to_json",
]
