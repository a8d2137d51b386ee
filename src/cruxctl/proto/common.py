"""Container-level protocol definitions."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from cruxctl.proto._enum import enum_from_json, enum_to_json


class ContainerOperation(IntEnum):
    """Operation requested on a single container."""

    UNRECOGNIZED = -1
    CONTAINER_OPERATION_UNSPECIFIED = 0
    START_CONTAINER = 1
    STOP_CONTAINER = 2
    RESTART_CONTAINER = 3


class ContainerState(IntEnum):
    """Container state as reported by an agent."""

    UNRECOGNIZED = -1
    CONTAINER_STATE_UNSPECIFIED = 0
    RUNNING = 1
    WAITING = 2
    EXITED = 3
    REMOVED = 4


def container_operation_to_json(value: Any) -> str:
    return enum_to_json(ContainerOperation, value)


def container_operation_from_json(obj: Any) -> ContainerOperation:
    return enum_from_json(ContainerOperation, obj)


def container_state_to_json(value: Any) -> str:
    return enum_to_json(ContainerState, value)


def container_state_from_json(obj: Any) -> ContainerState:
    return enum_from_json(ContainerState, obj)


@dataclass
class ContainerStateItem:
    """State report for one container identified by prefix and name."""

    prefix: str
    name: str
    state: ContainerState
    status: str = ""
    image_name: str = ""
    image_tag: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "container": {"prefix": self.prefix, "name": self.name},
            "state": int(self.state),
            "status": self.status,
            "imageName": self.image_name,
            "imageTag": self.image_tag,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContainerStateItem":
        container = data.get("container") or {}
        return cls(
            prefix=container.get("prefix", ""),
            name=container.get("name", ""),
            state=container_state_from_json(data.get("state", 0)),
            status=data.get("status", ""),
            image_name=data.get("imageName", ""),
            image_tag=data.get("imageTag", ""),
        )
