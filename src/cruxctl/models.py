"""Display-level string literals used by DTOs, state files and output."""

from enum import Enum


class ContainerOperation(str, Enum):
    """Container operations accepted from users."""

    START = "start"
    STOP = "stop"
    RESTART = "restart"


class ContainerState(str, Enum):
    """Known container states, lowercase protocol names."""

    RUNNING = "running"
    WAITING = "waiting"
    EXITED = "exited"
    REMOVED = "removed"


class NodeStatus(str, Enum):
    """Node connectivity as shown to users."""

    RUNNING = "running"
    UNREACHABLE = "unreachable"


class NodeType(str, Enum):
    """Orchestration backend of a node."""

    DOCKER = "docker"
    K8S = "k8s"


# Order matters: the first entry is the docker-like backend.
NODE_TYPE_VALUES: tuple[str, str] = (NodeType.DOCKER.value, NodeType.K8S.value)


class DeploymentStatus(str, Enum):
    """Deployment lifecycle status."""

    PREPARING = "preparing"
    IN_PROGRESS = "in_progress"
    SUCCESSFUL = "successful"
    FAILED = "failed"
    OBSOLETE = "obsolete"
    DOWNGRADED = "downgraded"


class DeploymentEventType(str, Enum):
    """Kinds of entries in a deployment's event log."""

    LOG = "log"
    DEPLOYMENT_STATUS = "deployment-status"
    CONTAINER_STATE = "container-state"
