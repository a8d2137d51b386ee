"""Node-level protocol definitions."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from cruxctl.proto._enum import enum_from_json, enum_to_json
from cruxctl.proto.common import ContainerOperation, container_operation_from_json


class NodeType(IntEnum):
    """Orchestration backend an agent drives."""

    UNRECOGNIZED = -1
    NODE_TYPE_UNSPECIFIED = 0
    DOCKER = 1
    K8S = 2


class NodeConnectionStatus(IntEnum):
    """Connection status of a node agent."""

    UNRECOGNIZED = -1
    CONNECTION_STATUS_UNSPECIFIED = 0
    UNREACHABLE = 1
    CONNECTED = 2


def node_type_to_json(value: Any) -> str:
    return enum_to_json(NodeType, value)


def node_type_from_json(obj: Any) -> NodeType:
    return enum_from_json(NodeType, obj)


def node_connection_status_to_json(value: Any) -> str:
    return enum_to_json(NodeConnectionStatus, value)


def node_connection_status_from_json(obj: Any) -> NodeConnectionStatus:
    return enum_from_json(NodeConnectionStatus, obj)


@dataclass
class NodeEventMessage:
    """Status event published by a node agent."""

    id: str
    status: NodeConnectionStatus
    address: str | None = None
    version: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "status": int(self.status),
            "address": self.address,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NodeEventMessage":
        return cls(
            id=data.get("id", ""),
            status=node_connection_status_from_json(data.get("status", 0)),
            address=data.get("address"),
            version=data.get("version"),
        )


@dataclass
class ContainerCommandRequest:
    """Request for an agent to run an operation on one container."""

    prefix: str
    name: str
    operation: ContainerOperation

    def to_dict(self) -> dict[str, Any]:
        return {
            "container": {"prefix": self.prefix, "name": self.name},
            "operation": int(self.operation),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContainerCommandRequest":
        container = data.get("container") or {}
        return cls(
            prefix=container.get("prefix", ""),
            name=container.get("name", ""),
            operation=container_operation_from_json(data.get("operation", 0)),
        )
