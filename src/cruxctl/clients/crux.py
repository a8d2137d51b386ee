"""Crux REST API client using httpx."""

from typing import Any

import httpx

from cruxctl.config import ApiConfig
from cruxctl.core.exceptions import ApiError, AuthenticationError
from cruxctl.core.logging import StructuredLogger

logger = StructuredLogger(__name__)

ROUTE_DEPLOYMENTS = "/deployments"


class CruxApiClient:
    """Client for the crux deployments API.

    Method names and return shapes match :class:`cruxctl.deploy.DeployService`
    so commands can use either.
    """

    def __init__(self, config: ApiConfig):
        self._config = config
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            url = self._config.get_url()
            token = self._config.get_token()

            if not url:
                raise ApiError("Crux API URL not configured")
            if not token:
                raise AuthenticationError("Crux API token not configured")

            headers = {
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            }

            self._client = httpx.Client(
                base_url=url.rstrip("/"),
                headers=headers,
                timeout=self._config.timeout,
                verify=not self._config.insecure,
            )

            logger.debug("Created crux API client", url=url)

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
                raise AuthenticationError(f"Crux API rejected credentials ({status_code})")
            try:
                error_data = e.response.json()
            except ValueError:
                error_data = None
            if isinstance(error_data, dict) and error_data.get("message"):
                message = str(error_data["message"])
            else:
                message = e.response.text or str(e)
            raise ApiError(message, status_code=status_code)

        except httpx.RequestError as e:
            raise ApiError(f"Request failed: {e}")

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "CruxApiClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @staticmethod
    def location_of(deployment_id: str) -> str:
        return f"{ROUTE_DEPLOYMENTS}/{deployment_id}"

    # Deployment operations
    def get_deployments(self) -> list[dict[str, Any]]:
        return self._request("GET", ROUTE_DEPLOYMENTS) or []

    def get_deployment_details(self, deployment_id: str) -> dict[str, Any]:
        return self._request("GET", self.location_of(deployment_id))

    def get_deployment_events(self, deployment_id: str) -> list[dict[str, Any]]:
        return self._request("GET", f"{self.location_of(deployment_id)}/events") or []

    def get_instance(self, deployment_id: str, instance_id: str) -> dict[str, Any]:
        return self._request("GET", f"{self.location_of(deployment_id)}/instances/{instance_id}")

    def get_instance_secrets(self, deployment_id: str, instance_id: str) -> dict[str, Any]:
        return self._request(
            "GET", f"{self.location_of(deployment_id)}/instances/{instance_id}/secrets"
        )

    def create_deployment(self, request: dict[str, Any], identity: str | None = None) -> dict[str, Any]:
        """Create a deployment; identity comes from the token on this side."""
        body = self._request("POST", ROUTE_DEPLOYMENTS, json=request)
        return {"url": self.location_of(body["id"]), "body": body}

    def patch_deployment(
        self, deployment_id: str, request: dict[str, Any], identity: str | None = None
    ) -> None:
        self._request("PATCH", self.location_of(deployment_id), json=request)

    def patch_instance(
        self,
        deployment_id: str,
        instance_id: str,
        request: dict[str, Any],
        identity: str | None = None,
    ) -> None:
        self._request(
            "PATCH", f"{self.location_of(deployment_id)}/instances/{instance_id}", json=request
        )

    def delete_deployment(self, deployment_id: str) -> None:
        self._request("DELETE", self.location_of(deployment_id))

    def start_deployment(self, deployment_id: str, identity: str | None = None) -> None:
        self._request("POST", f"{self.location_of(deployment_id)}/start")

    def copy_deployment(
        self, deployment_id: str, identity: str | None = None, force: bool = False
    ) -> dict[str, Any]:
        body = self._request(
            "POST",
            f"{self.location_of(deployment_id)}/copy",
            params={"force": str(force).lower()},
        )
        return {"url": self.location_of(body["id"]), "body": body}

    def get_deployment_log(self, deployment_id: str, skip: int = 0, take: int = 100) -> dict[str, Any]:
        return self._request(
            "GET", f"{self.location_of(deployment_id)}/log", params={"skip": skip, "take": take}
        )
