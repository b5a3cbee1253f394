"""Test the HTTP API routes."""

import pytest
from fastapi.testclient import TestClient

from provisioning_engine.api.dependencies import (
    get_creation_service,
    get_server_repository,
    get_startup_service,
)
from provisioning_engine.api.main import app
from provisioning_engine.services.startup import StartupVariableService


@pytest.fixture
def client(creation_service, server_repository, egg_repository):
    app.dependency_overrides[get_creation_service] = lambda: creation_service
    app.dependency_overrides[get_server_repository] = lambda: server_repository
    app.dependency_overrides[get_startup_service] = lambda: StartupVariableService(
        server_repository, egg_repository
    )

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def payload(node, paper_egg):
    return {
        "name": "Survival",
        "owner_id": 1,
        "node_id": node.id,
        "egg_id": paper_egg.id,
        "memory": 2048,
        "disk": 10240,
        "ports": ["25565"],
        "environment": {"SERVER_JARFILE": "paper.jar"},
    }


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestCreateServerRoute:

    def test_create_returns_201(self, client, payload):
        response = client.post("/servers", json=payload)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "installing"
        assert body["image"] == "ghcr.io/parkervcp/yolks:java_21"
        assert body["uuid_short"] == body["uuid"][:8]

    def test_validation_error_is_422_with_field(self, client, payload):
        payload["environment"]["SERVER_JARFILE"] = "paper.zip"

        response = client.post("/servers", json=payload)

        assert response.status_code == 422
        assert response.json()["detail"]["field"] == "Server Jar File"

    def test_unknown_egg_is_400(self, client, payload):
        payload["egg_id"] = 999

        response = client.post("/servers", json=payload)

        assert response.status_code == 400

    def test_invalid_port_is_400(self, client, payload):
        payload["ports"] = ["80"]

        response = client.post("/servers", json=payload)

        assert response.status_code == 400

    def test_daemon_failure_is_502_and_rolled_back(self, client, payload, daemon, server_repository):
        daemon.fail_create = True

        response = client.post("/servers", json=payload)

        assert response.status_code == 502
        assert server_repository.count() == 0


class TestServerRoutes:

    def test_get_server(self, client, payload):
        created = client.post("/servers", json=payload).json()

        response = client.get(f"/servers/{created['uuid_short']}")

        assert response.status_code == 200
        assert response.json()["uuid"] == created["uuid"]

    def test_get_missing_server(self, client):
        assert client.get("/servers/deadbeef").status_code == 404

    def test_list_startup_variables(self, client, payload):
        created = client.post("/servers", json=payload).json()

        response = client.get(f"/servers/{created['uuid']}/startup")

        assert response.status_code == 200
        keys = [v["env_variable"] for v in response.json()]
        assert "SERVER_JARFILE" in keys
        assert "DL_PATH" not in keys

    def test_update_startup_variable(self, client, payload):
        created = client.post("/servers", json=payload).json()

        response = client.put(
            f"/servers/{created['uuid']}/startup/variable",
            json={"key": "SERVER_JARFILE", "value": "custom.jar"},
        )

        assert response.status_code == 200
        assert response.json() == {"key": "SERVER_JARFILE", "value": "custom.jar"}

    def test_update_startup_variable_missing_server(self, client):
        response = client.put(
            "/servers/missing0/startup/variable",
            json={"key": "SERVER_JARFILE", "value": "custom.jar"},
        )

        assert response.status_code == 404


class TestRoutePaths:

    def test_create_without_trailing_slash(self, client, payload):
        response = client.post("/servers", json=payload, follow_redirects=False)

        assert response.status_code == 201
