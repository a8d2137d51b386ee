"""Deployment data models.

``to_dict``/``from_dict`` are the persisted form (snake_case). ``to_dto`` and
friends produce the API shape (camelCase), identical to what the remote crux
API returns so commands can render either source.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from cruxctl.core.utils import new_id, parse_datetime, utcnow
from cruxctl.models import DeploymentEventType, DeploymentStatus, NodeType

# Statuses in which a deployment may still be edited or started
MUTABLE_STATUSES = (DeploymentStatus.PREPARING, DeploymentStatus.FAILED)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass
class Audit:
    """Creation and last-update stamps."""

    created_at: datetime = field(default_factory=utcnow)
    created_by: str = ""
    updated_at: datetime | None = None
    updated_by: str | None = None

    def touch(self, identity: str) -> None:
        self.updated_at = utcnow()
        self.updated_by = identity

    def to_dict(self) -> dict[str, Any]:
        return {
            "created_at": _iso(self.created_at),
            "created_by": self.created_by,
            "updated_at": _iso(self.updated_at),
            "updated_by": self.updated_by,
        }

    def to_dto(self) -> dict[str, Any]:
        return {
            "createdAt": _iso(self.created_at),
            "createdBy": self.created_by,
            "updatedAt": _iso(self.updated_at),
            "updatedBy": self.updated_by,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Audit":
        return cls(
            created_at=parse_datetime(data.get("created_at")) or utcnow(),
            created_by=data.get("created_by", ""),
            updated_at=parse_datetime(data.get("updated_at")),
            updated_by=data.get("updated_by"),
        )


@dataclass
class Image:
    """Container image of an instance."""

    name: str
    tag: str = "latest"
    order: int = 0
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "tag": self.tag, "order": self.order}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Image":
        return cls(
            id=data.get("id") or new_id(),
            name=data.get("name", ""),
            tag=data.get("tag", "latest"),
            order=data.get("order", 0),
        )


@dataclass
class Instance:
    """A container of a deployment."""

    image: Image
    id: str = field(default_factory=new_id)
    state: str | None = None
    config: dict[str, str] = field(default_factory=dict)
    secret_keys: list[str] = field(default_factory=list)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def container_name(self) -> str:
        return self.config.get("name") or self.image.name.rsplit("/", 1)[-1]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "image": self.image.to_dict(),
            "state": self.state,
            "config": self.config,
            "secret_keys": self.secret_keys,
            "updated_at": _iso(self.updated_at),
        }

    def to_dto(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "state": self.state,
            "updatedAt": _iso(self.updated_at),
            "image": self.image.to_dict(),
            "config": dict(self.config),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Instance":
        return cls(
            id=data.get("id") or new_id(),
            image=Image.from_dict(data.get("image", {})),
            state=data.get("state"),
            config=data.get("config", {}),
            secret_keys=data.get("secret_keys", []),
            updated_at=parse_datetime(data.get("updated_at")) or utcnow(),
        )


@dataclass
class DeploymentEvent:
    """Entry of a deployment's event log.

    Exactly one of ``log``, ``deployment_status`` or ``container_state`` is
    set, according to ``type``.
    """

    type: DeploymentEventType
    created_at: datetime = field(default_factory=utcnow)
    log: list[str] | None = None
    deployment_status: DeploymentStatus | None = None
    container_state: dict[str, str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "created_at": _iso(self.created_at),
            "log": self.log,
            "deployment_status": self.deployment_status.value if self.deployment_status else None,
            "container_state": self.container_state,
        }

    def to_dto(self) -> dict[str, Any]:
        container_state = None
        if self.container_state:
            container_state = {
                "state": self.container_state.get("state"),
                "instanceId": self.container_state.get("instance_id"),
            }
        return {
            "type": self.type.value,
            "deploymentStatus": self.deployment_status.value if self.deployment_status else None,
            "createdAt": _iso(self.created_at),
            "log": self.log,
            "containerState": container_state,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeploymentEvent":
        status = data.get("deployment_status")
        return cls(
            type=DeploymentEventType(data["type"]),
            created_at=parse_datetime(data.get("created_at")) or utcnow(),
            log=data.get("log"),
            deployment_status=DeploymentStatus(status) if status else None,
            container_state=data.get("container_state"),
        )


@dataclass
class NodeRef:
    """Denormalized node reference stored on a deployment."""

    id: str
    name: str = ""
    type: NodeType = NodeType.DOCKER

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "type": self.type.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NodeRef":
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            type=NodeType(data.get("type", NodeType.DOCKER.value)),
        )


@dataclass
class Deployment:
    """Deployment of a product version to a node."""

    # Identity
    id: str = field(default_factory=new_id)
    prefix: str = ""
    note: str | None = None

    # Target
    node: NodeRef = field(default_factory=lambda: NodeRef(id=""))
    product: str = ""
    version: str = ""
    environment: dict[str, str] = field(default_factory=dict)
    instances: list[Instance] = field(default_factory=list)

    # Status
    status: DeploymentStatus = DeploymentStatus.PREPARING

    # History
    events: list[DeploymentEvent] = field(default_factory=list)
    audit: Audit = field(default_factory=Audit)

    @property
    def is_mutable(self) -> bool:
        """Check if the deployment can still be edited or started."""
        return self.status in MUTABLE_STATUSES

    @property
    def is_in_progress(self) -> bool:
        return self.status == DeploymentStatus.IN_PROGRESS

    def get_instance(self, instance_id: str) -> Instance | None:
        for instance in self.instances:
            if instance.id == instance_id:
                return instance
        return None

    def find_instance(self, container_name: str) -> Instance | None:
        """Find an instance by its container name."""
        for instance in self.instances:
            if instance.container_name == container_name:
                return instance
        return None

    def add_log(self, *lines: str) -> None:
        self.events.append(DeploymentEvent(type=DeploymentEventType.LOG, log=list(lines)))

    def set_status(self, status: DeploymentStatus) -> None:
        """Change status and record it in the event log."""
        self.status = status
        self.events.append(
            DeploymentEvent(type=DeploymentEventType.DEPLOYMENT_STATUS, deployment_status=status)
        )

    def set_container_state(self, instance: Instance, state: str) -> None:
        """Change an instance's state and record it in the event log."""
        instance.state = state
        instance.updated_at = utcnow()
        self.events.append(
            DeploymentEvent(
                type=DeploymentEventType.CONTAINER_STATE,
                container_state={"instance_id": instance.id, "state": state},
            )
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "prefix": self.prefix,
            "note": self.note,
            "node": self.node.to_dict(),
            "product": self.product,
            "version": self.version,
            "environment": self.environment,
            "instances": [i.to_dict() for i in self.instances],
            "status": self.status.value,
            "events": [e.to_dict() for e in self.events],
            "audit": self.audit.to_dict(),
        }

    def to_dto(self) -> dict[str, Any]:
        """Summary as returned by the deployment list."""
        return {
            "id": self.id,
            "prefix": self.prefix,
            "status": self.status.value,
            "note": self.note,
            "audit": self.audit.to_dto(),
            "product": {"name": self.product},
            "version": {"name": self.version},
            "node": self.node.to_dict(),
        }

    def to_details_dto(self) -> dict[str, Any]:
        """Full view including environment and instances."""
        return {
            **self.to_dto(),
            "environment": [{"key": k, "value": v} for k, v in self.environment.items()],
            "instances": [i.to_dto() for i in self.instances],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Deployment":
        """Create from dictionary."""
        return cls(
            id=data.get("id") or new_id(),
            prefix=data.get("prefix", ""),
            note=data.get("note"),
            node=NodeRef.from_dict(data.get("node", {})),
            product=data.get("product", ""),
            version=data.get("version", ""),
            environment=data.get("environment", {}),
            instances=[Instance.from_dict(i) for i in data.get("instances", [])],
            status=DeploymentStatus(data.get("status", DeploymentStatus.PREPARING.value)),
            events=[DeploymentEvent.from_dict(e) for e in data.get("events", [])],
            audit=Audit.from_dict(data.get("audit", {})),
        )
