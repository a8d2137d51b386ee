"""Node agent client using httpx.

Agents accept JSON over HTTP. Protocol enumerations travel as their integer
values.
"""

from typing import Any

import httpx

from cruxctl.config import AgentConfig
from cruxctl.core.exceptions import AgentError, AuthenticationError
from cruxctl.core.logging import StructuredLogger
from cruxctl.proto import ContainerCommandRequest, ContainerStateItem, NodeEventMessage

logger = StructuredLogger(__name__)


class AgentClient:
    """Client for a single node agent."""

    def __init__(self, config: AgentConfig, url: str | None = None):
        self._config = config
        self._url = url
        self._client: httpx.Client | None = None

    @property
    def url(self) -> str | None:
        return self._url or self._config.get_url()

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            url = self.url
            if not url:
                raise AgentError("Agent URL not configured")

            headers = {"Content-Type": "application/json"}
            token = self._config.get_token()
            if token:
                headers["Authorization"] = f"Bearer {token}"

            self._client = httpx.Client(
                base_url=url.rstrip("/"),
                headers=headers,
                timeout=self._config.timeout,
            )

            logger.debug("Created agent client", url=url)

        return self._client

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Make an API request."""
        try:
            response = self.client.request(method, path, **kwargs)
            response.raise_for_status()

            if response.content:
                return response.json()
            return None

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            if status_code in (401, 403):
                raise AuthenticationError(f"Agent rejected credentials ({status_code})")
            try:
                error_data = e.response.json()
            except ValueError:
                error_data = None
            if isinstance(error_data, dict) and error_data.get("message"):
                message = str(error_data["message"])
            else:
                message = e.response.text or str(e)
            raise AgentError(message, status_code=status_code)

        except httpx.RequestError as e:
            raise AgentError(f"Agent request failed: {e}")

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "AgentClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # Node
    def get_status(self) -> NodeEventMessage:
        """Fetch the agent's connection status event."""
        return NodeEventMessage.from_dict(self._request("GET", "/status") or {})

    # Containers
    def send_container_command(self, request: ContainerCommandRequest) -> None:
        self._request("POST", "/containers/command", json=request.to_dict())

    def get_container_states(self, prefix: str) -> list[ContainerStateItem]:
        response = self._request("GET", "/containers", params={"prefix": prefix}) or {}
        return [ContainerStateItem.from_dict(item) for item in response.get("items", [])]

    def get_secrets(self, prefix: str, name: str) -> dict[str, Any]:
        """Return ``{"publicKey": ..., "keys": [...]}`` for one container."""
        return self._request("GET", f"/containers/{prefix}/{name}/secrets") or {}

    # Deployments
    def deploy(self, payload: dict[str, Any]) -> None:
        self._request("POST", "/deployments", json=payload)

    def get_deployment_status(self, deployment_id: str) -> dict[str, Any]:
        """Return ``{"status": ..., "log": [...]}`` for a deployment."""
        return self._request("GET", f"/deployments/{deployment_id}/status") or {}
