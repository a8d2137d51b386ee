"""Deployment state persistence."""

import json
from pathlib import Path

from cruxctl.core.exceptions import DeploymentError, NotFoundError
from cruxctl.core.logging import StructuredLogger
from cruxctl.core.utils import get_config_dir
from cruxctl.deploy.models import Deployment, DeploymentStatus

logger = StructuredLogger(__name__)


class DeploymentState:
    """Store deployments as one JSON file each."""

    def __init__(self, state_dir: str | Path | None = None):
        """Initialize deployment state manager.

        Args:
            state_dir: Base state directory; deployments go to ``<state_dir>/deployments``
        """
        base = Path(state_dir) if state_dir else get_config_dir() / "state"
        self._state_dir = base / "deployments"
        self._state_dir.mkdir(parents=True, exist_ok=True)

    @property
    def state_dir(self) -> Path:
        return self._state_dir

    def _path(self, deployment_id: str) -> Path:
        return self._state_dir / f"{deployment_id}.json"

    def save(self, deployment: Deployment) -> None:
        """Save deployment state.

        Args:
            deployment: Deployment to save
        """
        state_file = self._path(deployment.id)
        tmp_file = state_file.with_suffix(".json.tmp")

        try:
            with open(tmp_file, "w") as f:
                json.dump(deployment.to_dict(), f, indent=2)
            tmp_file.replace(state_file)
        except OSError as e:
            raise DeploymentError(
                f"Failed to save deployment state: {e}",
                deployment_id=deployment.id,
            )

        logger.debug("Saved deployment state", id=deployment.id)

    def load(self, deployment_id: str) -> Deployment:
        """Load deployment state.

        Args:
            deployment_id: Deployment ID

        Returns:
            Loaded Deployment
        """
        state_file = self._path(deployment_id)

        if not state_file.exists():
            raise NotFoundError(
                f"Deployment not found: {deployment_id}",
                entity="deployment",
                entity_id=deployment_id,
            )

        try:
            with open(state_file) as f:
                data = json.load(f)
            return Deployment.from_dict(data)
        except (OSError, ValueError, KeyError) as e:
            raise DeploymentError(
                f"Failed to load deployment state: {e}",
                deployment_id=deployment_id,
            )

    def delete(self, deployment_id: str) -> None:
        """Delete deployment state.

        Args:
            deployment_id: Deployment ID
        """
        state_file = self._path(deployment_id)

        if state_file.exists():
            state_file.unlink()
            logger.debug("Deleted deployment state", id=deployment_id)

    def list(
        self,
        status: DeploymentStatus | None = None,
        node_id: str | None = None,
        prefix: str | None = None,
    ) -> list[Deployment]:
        """List deployments, newest first.

        Args:
            status: Filter by status
            node_id: Filter by target node
            prefix: Filter by container prefix

        Returns:
            List of Deployments
        """
        deployments: list[Deployment] = []

        for state_file in self._state_dir.glob("*.json"):
            try:
                with open(state_file) as f:
                    data = json.load(f)
                deployment = Deployment.from_dict(data)
            except (OSError, ValueError, KeyError) as e:
                logger.warning("Skipping unreadable deployment state", file=state_file.name, error=e)
                continue

            if status and deployment.status != status:
                continue
            if node_id and deployment.node.id != node_id:
                continue
            if prefix and deployment.prefix != prefix:
                continue

            deployments.append(deployment)

        deployments.sort(key=lambda d: d.audit.created_at, reverse=True)
        return deployments
