"""Deployment operations.

Each public method corresponds to one route of the crux deployments API and
returns the same DTO shape, so :class:`cruxctl.clients.CruxApiClient` can be
swapped in by callers.
"""

from typing import Any

from cruxctl.core.exceptions import DeploymentError, NotFoundError, ValidationError
from cruxctl.core.logging import StructuredLogger
from cruxctl.core.utils import is_uuid, utcnow
from cruxctl.deploy.dtos import (
    CreateDeploymentRequest,
    PaginationQuery,
    PatchDeploymentRequest,
    PatchInstanceRequest,
    parse_request,
)
from cruxctl.deploy.models import (
    Audit,
    Deployment,
    Image,
    Instance,
    NodeRef,
)
from cruxctl.deploy.state import DeploymentState
from cruxctl.mappers import container_state_to_display, node_type_to_protocol
from cruxctl.models import DeploymentEventType, DeploymentStatus
from cruxctl.nodes.service import NodeService
from cruxctl.proto import ContainerStateItem

logger = StructuredLogger(__name__)

ROUTE_DEPLOYMENTS = "deployments"


def location_of(deployment_id: str) -> str:
    return f"/{ROUTE_DEPLOYMENTS}/{deployment_id}"


def validate_ids(**ids: str) -> None:
    """Reject path parameters that are not UUIDs."""
    for name, value in ids.items():
        if not is_uuid(value):
            raise ValidationError(f"Invalid {name}: {value}", details={name: value})


class DeployService:
    """Deployment CRUD and lifecycle on top of local state."""

    def __init__(self, state: DeploymentState, nodes: NodeService):
        self._state = state
        self._nodes = nodes

    def _load(self, deployment_id: str) -> Deployment:
        validate_ids(deployment_id=deployment_id)
        return self._state.load(deployment_id)

    def _load_instance(self, deployment: Deployment, instance_id: str) -> Instance:
        validate_ids(instance_id=instance_id)
        instance = deployment.get_instance(instance_id)
        if instance is None:
            raise NotFoundError(
                f"Instance not found: {instance_id}", entity="instance", entity_id=instance_id
            )
        return instance

    @staticmethod
    def _require_mutable(deployment: Deployment) -> None:
        if not deployment.is_mutable:
            raise DeploymentError(
                f"Deployment is {deployment.status.value} and can no longer be modified",
                deployment_id=deployment.id,
            )

    # Queries

    def get_deployments(self) -> list[dict[str, Any]]:
        return [d.to_dto() for d in self._state.list()]

    def get_deployment_details(self, deployment_id: str) -> dict[str, Any]:
        return self._load(deployment_id).to_details_dto()

    def get_deployment_events(self, deployment_id: str) -> list[dict[str, Any]]:
        return [e.to_dto() for e in self._load(deployment_id).events]

    def get_instance(self, deployment_id: str, instance_id: str) -> dict[str, Any]:
        deployment = self._load(deployment_id)
        return self._load_instance(deployment, instance_id).to_dto()

    def get_instance_secrets(self, deployment_id: str, instance_id: str) -> dict[str, Any]:
        """Secret keys of a deployed container, as known by the node's agent."""
        deployment = self._load(deployment_id)
        instance = self._load_instance(deployment, instance_id)
        node = self._nodes.get_node(deployment.node.id)

        with self._nodes.agent_for(node) as agent:
            secrets = agent.get_secrets(deployment.prefix, instance.container_name)

        return {
            "container": {"prefix": deployment.prefix, "name": instance.container_name},
            "publicKey": secrets.get("publicKey"),
            "keys": secrets.get("keys", instance.secret_keys),
        }

    def get_deployment_log(self, deployment_id: str, skip: int = 0, take: int = 100) -> dict[str, Any]:
        """Page through the log entries of a deployment, oldest first."""
        query = parse_request(PaginationQuery, {"skip": skip, "take": take})
        deployment = self._load(deployment_id)

        entries = [
            {"createdAt": e.created_at.isoformat(), "log": e.log or []}
            for e in deployment.events
            if e.type == DeploymentEventType.LOG
        ]
        return {
            "items": entries[query.skip : query.skip + query.take],
            "total": len(entries),
        }

    # Commands

    def create_deployment(
        self, request: CreateDeploymentRequest | dict[str, Any], identity: str
    ) -> dict[str, Any]:
        req = parse_request(CreateDeploymentRequest, request)
        validate_ids(node_id=req.node_id)
        node = self._nodes.get_node(req.node_id)

        instances = [
            Instance(image=Image(name=img.name, tag=img.tag, order=order), config=dict(img.config))
            for order, img in enumerate(req.images)
        ]
        deployment = Deployment(
            prefix=req.prefix,
            note=req.note,
            node=NodeRef(id=node.id, name=node.name, type=node.type),
            product=req.product,
            version=req.version,
            environment=dict(req.environment),
            instances=instances,
            audit=Audit(created_by=identity),
        )
        self._state.save(deployment)

        logger.info("Created deployment", id=deployment.id, prefix=deployment.prefix, node=node.name)
        return {"url": location_of(deployment.id), "body": deployment.to_dto()}

    def patch_deployment(
        self, deployment_id: str, request: PatchDeploymentRequest | dict[str, Any], identity: str
    ) -> None:
        req = parse_request(PatchDeploymentRequest, request)
        deployment = self._load(deployment_id)
        self._require_mutable(deployment)

        if req.note is not None:
            deployment.note = req.note
        if req.prefix is not None:
            deployment.prefix = req.prefix
        if req.environment is not None:
            deployment.environment = dict(req.environment)

        deployment.audit.touch(identity)
        self._state.save(deployment)

    def patch_instance(
        self,
        deployment_id: str,
        instance_id: str,
        request: PatchInstanceRequest | dict[str, Any],
        identity: str,
    ) -> None:
        """Merge instance config; a ``None`` value removes the key."""
        req = parse_request(PatchInstanceRequest, request)
        deployment = self._load(deployment_id)
        self._require_mutable(deployment)
        instance = self._load_instance(deployment, instance_id)

        for key, value in req.config.items():
            if value is None:
                instance.config.pop(key, None)
            else:
                instance.config[key] = value

        instance.updated_at = utcnow()
        deployment.audit.touch(identity)
        self._state.save(deployment)

    def delete_deployment(self, deployment_id: str) -> None:
        deployment = self._load(deployment_id)
        if deployment.is_in_progress:
            raise DeploymentError(
                "Deployment is in progress and cannot be deleted", deployment_id=deployment_id
            )
        self._state.delete(deployment_id)
        logger.info("Deleted deployment", id=deployment_id)

    def start_deployment(self, deployment_id: str, identity: str) -> None:
        """Hand the deployment to the node's agent and mark it in progress."""
        deployment = self._load(deployment_id)
        self._require_mutable(deployment)
        if not deployment.instances:
            raise DeploymentError("Deployment has no instances", deployment_id=deployment_id)

        node = self._nodes.get_node(deployment.node.id)
        if not node.is_running:
            raise DeploymentError(f"Node {node.name} is unreachable", deployment_id=deployment_id)

        log = logger.bind(id=deployment_id, node=node.name)
        agent = self._nodes.agent_for(node)
        if agent.url:
            with agent:
                agent.deploy(self._deploy_request(deployment))
        else:
            log.warning("No agent URL known for node, deploy request not sent")

        deployment.set_status(DeploymentStatus.IN_PROGRESS)
        deployment.add_log(f"Deployment started by {identity}")
        deployment.audit.touch(identity)
        self._state.save(deployment)

        log.info("Started deployment")

    def copy_deployment(self, deployment_id: str, identity: str, force: bool = False) -> dict[str, Any]:
        """Copy a deployment into a new preparing one on the same node and prefix.

        An existing preparing deployment with the same node and prefix blocks
        the copy unless ``force`` is set, in which case it is deleted.
        """
        source = self._load(deployment_id)

        conflicts = [
            d
            for d in self._state.list(
                status=DeploymentStatus.PREPARING, node_id=source.node.id, prefix=source.prefix
            )
            if d.id != source.id
        ]
        if conflicts and not force:
            raise DeploymentError(
                "A preparing deployment already exists for this node and prefix",
                deployment_id=deployment_id,
                details={"existing": conflicts[0].id},
            )
        for conflict in conflicts:
            self._state.delete(conflict.id)
            logger.info("Removed conflicting deployment", id=conflict.id)

        copy = Deployment(
            prefix=source.prefix,
            note=source.note,
            node=NodeRef(id=source.node.id, name=source.node.name, type=source.node.type),
            product=source.product,
            version=source.version,
            environment=dict(source.environment),
            instances=[
                Instance(
                    image=Image(name=i.image.name, tag=i.image.tag, order=i.image.order),
                    config=dict(i.config),
                    secret_keys=list(i.secret_keys),
                )
                for i in source.instances
            ],
            audit=Audit(created_by=identity),
        )
        self._state.save(copy)

        logger.info("Copied deployment", source=source.id, id=copy.id)
        return {"url": location_of(copy.id), "body": copy.to_dto()}

    # Agent reports

    def apply_deployment_status(
        self, deployment_id: str, status: str, log: list[str] | None = None
    ) -> Deployment:
        """Record a status reported by the agent. Unknown statuses are logged and skipped."""
        deployment = self._load(deployment_id)

        if log:
            deployment.add_log(*log)
        try:
            new_status = DeploymentStatus(status)
        except ValueError:
            logger.warning("Ignoring unknown deployment status", id=deployment_id, status=status)
            new_status = deployment.status

        if new_status != deployment.status:
            deployment.set_status(new_status)

        self._state.save(deployment)
        return deployment

    def apply_container_states(self, deployment_id: str, items: list[ContainerStateItem]) -> Deployment:
        """Map container state reports onto the deployment's instances."""
        deployment = self._load(deployment_id)

        for item in items:
            if item.prefix != deployment.prefix:
                continue
            instance = deployment.find_instance(item.name)
            if instance is None:
                logger.debug("No instance for container", prefix=item.prefix, name=item.name)
                continue
            state = container_state_to_display(item.state)
            if instance.state != state:
                deployment.set_container_state(instance, state)

        self._state.save(deployment)
        return deployment

    def sync_deployment(self, deployment_id: str) -> Deployment:
        """Pull status and container states from the node's agent."""
        deployment = self._load(deployment_id)
        node = self._nodes.get_node(deployment.node.id)

        with self._nodes.agent_for(node) as agent:
            report = agent.get_deployment_status(deployment_id)
            items = agent.get_container_states(deployment.prefix)

        if report.get("status"):
            self.apply_deployment_status(deployment_id, report["status"], report.get("log"))
        return self.apply_container_states(deployment_id, items)

    @staticmethod
    def _deploy_request(deployment: Deployment) -> dict[str, Any]:
        return {
            "id": deployment.id,
            "prefix": deployment.prefix,
            "nodeType": int(node_type_to_protocol(deployment.node.type)),
            "environment": deployment.environment,
            "instances": [
                {
                    "id": i.id,
                    "name": i.container_name,
                    "image": f"{i.image.name}:{i.image.tag}",
                    "config": i.config,
                }
                for i in sorted(deployment.instances, key=lambda i: i.image.order)
            ],
        }
