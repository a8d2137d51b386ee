"""Tests for the crux API and agent clients."""

from unittest.mock import patch

import httpx
import pytest

from cruxctl.config import AgentConfig, ApiConfig
from cruxctl.core.exceptions import AgentError, ApiError, AuthenticationError
from cruxctl.proto import ContainerCommandRequest, ContainerOperation, ContainerState, NodeConnectionStatus


def _transport(status_code: int, payload=None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=payload)

    return httpx.MockTransport(handler)


class TestCruxApiClient:
    """Tests for CruxApiClient."""

    @pytest.fixture
    def api_config(self):
        return ApiConfig(url="https://crux.test", token="test-token")

    def test_client_initialization(self, api_config):
        """Test client can be initialized."""
        from cruxctl.clients.crux import CruxApiClient

        client = CruxApiClient(api_config)
        assert client._config == api_config
        assert client._client is None  # Lazy initialization

    def test_missing_url(self):
        from cruxctl.clients.crux import CruxApiClient

        client = CruxApiClient(ApiConfig(token="test-token"))
        with pytest.raises(ApiError):
            client.client

    def test_missing_token(self):
        from cruxctl.clients.crux import CruxApiClient

        client = CruxApiClient(ApiConfig(url="https://crux.test"))
        with pytest.raises(AuthenticationError):
            client.client

    @patch("cruxctl.clients.crux.CruxApiClient._request")
    def test_create_deployment(self, mock_request, api_config):
        """Test creating a deployment returns its location."""
        from cruxctl.clients.crux import CruxApiClient

        mock_request.return_value = {"id": "d-1", "prefix": "shop"}

        client = CruxApiClient(api_config)
        result = client.create_deployment({"prefix": "shop"})

        assert result == {"url": "/deployments/d-1", "body": {"id": "d-1", "prefix": "shop"}}
        mock_request.assert_called_once_with("POST", "/deployments", json={"prefix": "shop"})

    @patch("cruxctl.clients.crux.CruxApiClient._request")
    def test_copy_deployment_force(self, mock_request, api_config):
        from cruxctl.clients.crux import CruxApiClient

        mock_request.return_value = {"id": "d-2"}

        client = CruxApiClient(api_config)
        result = client.copy_deployment("d-1", force=True)

        assert result["url"] == "/deployments/d-2"
        mock_request.assert_called_once_with("POST", "/deployments/d-1/copy", params={"force": "true"})

    @patch("cruxctl.clients.crux.CruxApiClient._request")
    def test_get_deployment_log(self, mock_request, api_config):
        from cruxctl.clients.crux import CruxApiClient

        mock_request.return_value = {"items": [], "total": 0}

        client = CruxApiClient(api_config)
        client.get_deployment_log("d-1", skip=10, take=20)

        mock_request.assert_called_once_with("GET", "/deployments/d-1/log", params={"skip": 10, "take": 20})

    @pytest.mark.parametrize(
        "status_code,error",
        [(401, AuthenticationError), (403, AuthenticationError), (404, ApiError), (500, ApiError)],
    )
    def test_http_errors(self, api_config, status_code, error):
        from cruxctl.clients.crux import CruxApiClient

        client = CruxApiClient(api_config)
        client._client = httpx.Client(
            base_url="https://crux.test", transport=_transport(status_code, {"message": "nope"})
        )

        with pytest.raises(error):
            client.get_deployments()

    def test_error_message_from_body(self, api_config):
        from cruxctl.clients.crux import CruxApiClient

        client = CruxApiClient(api_config)
        client._client = httpx.Client(
            base_url="https://crux.test", transport=_transport(409, {"message": "prefix in use"})
        )

        with pytest.raises(ApiError) as exc_info:
            client.start_deployment("d-1")
        assert exc_info.value.status_code == 409
        assert "prefix in use" in str(exc_info.value)

    @pytest.mark.parametrize("payload", [["bad"], "bad", 42, {"error": "bad"}])
    def test_error_body_without_message(self, api_config, payload):
        from cruxctl.clients.crux import CruxApiClient

        client = CruxApiClient(api_config)
        client._client = httpx.Client(base_url="https://crux.test", transport=_transport(400, payload))

        with pytest.raises(ApiError) as exc_info:
            client.get_deployments()
        assert exc_info.value.status_code == 400


class TestAgentClient:
    """Tests for AgentClient."""

    @pytest.fixture
    def agent_config(self):
        return AgentConfig(url="http://agent.test:5000", token="agent-token")

    def test_node_address_wins(self, agent_config):
        from cruxctl.clients.agent import AgentClient

        client = AgentClient(agent_config, url="http://10.0.0.5:5000")
        assert client.url == "http://10.0.0.5:5000"
        assert AgentClient(agent_config).url == "http://agent.test:5000"

    def test_missing_url(self):
        from cruxctl.clients.agent import AgentClient

        with pytest.raises(AgentError):
            AgentClient(AgentConfig()).client

    @patch("cruxctl.clients.agent.AgentClient._request")
    def test_send_container_command(self, mock_request, agent_config):
        from cruxctl.clients.agent import AgentClient

        request = ContainerCommandRequest(prefix="shop", name="web", operation=ContainerOperation.STOP_CONTAINER)
        AgentClient(agent_config).send_container_command(request)

        mock_request.assert_called_once_with(
            "POST",
            "/containers/command",
            json={"container": {"prefix": "shop", "name": "web"}, "operation": 2},
        )

    @patch("cruxctl.clients.agent.AgentClient._request")
    def test_get_container_states(self, mock_request, agent_config):
        from cruxctl.clients.agent import AgentClient

        mock_request.return_value = {
            "items": [
                {"container": {"prefix": "shop", "name": "web"}, "state": 1, "imageName": "nginx"},
                {"container": {"prefix": "shop", "name": "db"}, "state": 42},
            ]
        }

        items = AgentClient(agent_config).get_container_states("shop")

        assert [(i.name, i.state) for i in items] == [
            ("web", ContainerState.RUNNING),
            ("db", ContainerState.UNRECOGNIZED),
        ]

    @patch("cruxctl.clients.agent.AgentClient._request")
    def test_get_status(self, mock_request, agent_config):
        from cruxctl.clients.agent import AgentClient

        mock_request.return_value = {"id": "n-1", "status": 2, "version": "0.3.1"}

        event = AgentClient(agent_config).get_status()

        assert event.status == NodeConnectionStatus.CONNECTED
        assert event.version == "0.3.1"

    def test_error_body_is_list(self, agent_config):
        from cruxctl.clients.agent import AgentClient

        client = AgentClient(agent_config)
        client._client = httpx.Client(base_url="http://agent.test:5000", transport=_transport(400, ["bad"]))

        with pytest.raises(AgentError) as exc_info:
            client.get_status()
        assert exc_info.value.status_code == 400
        assert "bad" in str(exc_info.value)

    def test_connection_error(self, agent_config):
        from cruxctl.clients.agent import AgentClient

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = AgentClient(agent_config)
        client._client = httpx.Client(base_url="http://agent.test:5000", transport=httpx.MockTransport(handler))

        with pytest.raises(AgentError):
            client.get_status()

    def test_context_manager_closes(self, agent_config):
        from cruxctl.clients.agent import AgentClient

        with AgentClient(agent_config) as client:
            client.client
            assert client._client is not None
        assert client._client is None
