"""Node data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from cruxctl.core.utils import new_id, parse_datetime, utcnow
from cruxctl.models import NodeStatus, NodeType


@dataclass
class Node:
    """A machine running a crux agent."""

    name: str
    type: NodeType = NodeType.DOCKER
    id: str = field(default_factory=new_id)
    status: NodeStatus = NodeStatus.UNREACHABLE
    address: str | None = None
    version: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    connected_at: datetime | None = None

    @property
    def is_running(self) -> bool:
        return self.status == NodeStatus.RUNNING

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "status": self.status.value,
            "address": self.address,
            "version": self.version,
            "created_at": self.created_at.isoformat(),
            "connected_at": self.connected_at.isoformat() if self.connected_at else None,
        }

    def to_dto(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "status": self.status.value,
            "address": self.address,
            "version": self.version,
            "connectedAt": self.connected_at.isoformat() if self.connected_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Node":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            type=NodeType(data.get("type", NodeType.DOCKER.value)),
            status=NodeStatus(data.get("status", NodeStatus.UNREACHABLE.value)),
            address=data.get("address"),
            version=data.get("version"),
            created_at=parse_datetime(data.get("created_at")) or utcnow(),
            connected_at=parse_datetime(data.get("connected_at")),
        )
