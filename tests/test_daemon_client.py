"""Test the daemon HTTP client."""

from unittest.mock import MagicMock

import pytest
import requests

from daemon_agent.client import DaemonServerClient
from provisioning_engine.core.errors import AgentConnectionError
from provisioning_engine.core.models import Server
from provisioning_engine.domain.models import Node


def make_response(status_code, body=None):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.json.return_value = body or {}
    response.text = ""
    return response


@pytest.fixture
def node(memory_node_repository):
    return memory_node_repository.create(
        Node(name="node-1", fqdn="node1.example.com", daemon_token="secret-token")
    )


@pytest.fixture
def server(node):
    return Server(
        id=1,
        uuid="3f1c2b7e-9a4d-4c1e-8f2a-1b2c3d4e5f60",
        uuid_short="3f1c2b7e",
        node_id=node.id,
    )


@pytest.fixture
def http():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(memory_node_repository, http):
    return DaemonServerClient(
        memory_node_repository, session=http, connect_timeout=2, request_timeout=10
    )


class TestCreateServer:

    def test_posts_uuid_with_bearer_token(self, client, http, server):
        http.request.return_value = make_response(202)

        client.create_server(server, start_on_completion=False)

        args, kwargs = http.request.call_args
        assert args == ("post", "https://node1.example.com:8080/api/servers")
        assert kwargs["json"] == {"uuid": server.uuid, "start_on_completion": False}
        assert kwargs["headers"]["Authorization"] == "Bearer secret-token"
        assert kwargs["timeout"] == (2, 10)

    def test_non_2xx_raises(self, client, http, server, node):
        http.request.return_value = make_response(500, {"error": "disk full"})

        with pytest.raises(AgentConnectionError) as exc:
            client.create_server(server)

        assert exc.value.status_code == 500
        assert exc.value.node_id == node.id
        assert "disk full" in str(exc.value)

    def test_connection_error_raises(self, client, http, server):
        http.request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(AgentConnectionError):
            client.create_server(server)

    def test_timeout_raises(self, client, http, server):
        http.request.side_effect = requests.exceptions.Timeout()

        with pytest.raises(AgentConnectionError) as exc:
            client.create_server(server)

        assert exc.value.status_code is None

    def test_unknown_node_raises(self, client, http, server):
        server.node_id = 99

        with pytest.raises(AgentConnectionError):
            client.create_server(server)

        http.request.assert_not_called()


class TestDeleteServer:

    def test_deletes_by_uuid(self, client, http, server):
        http.request.return_value = make_response(204)

        client.delete_server(server)

        args, _ = http.request.call_args
        assert args == ("delete", f"https://node1.example.com:8080/api/servers/{server.uuid}")

    def test_not_found_counts_as_deleted(self, client, http, server):
        http.request.return_value = make_response(404)

        client.delete_server(server)

    def test_other_errors_raise(self, client, http, server):
        http.request.return_value = make_response(503)

        with pytest.raises(AgentConnectionError):
            client.delete_server(server)


class TestHealthCheck:

    def test_healthy(self, client, http, node):
        http.get.return_value = make_response(200)

        assert client.health_check(node) is True

    def test_unreachable(self, client, http, node):
        http.get.side_effect = requests.exceptions.ConnectionError("refused")

        assert client.health_check(node) is False
