# tests/test_health.py
from http import HTTPStatus

from fastapi.testclient import TestClient

from conftest import FailingGateway
from teamsync.main import create_app
from teamsync.services.workspace import Workspace


def test_health_endpoint_ok(client):
    """
    /health answers 200 with the expected JSON shape once data is loaded.
    """
    response = client.get("/health")

    assert response.status_code == HTTPStatus.OK
    data = response.json()

    assert data["status"] == "ok"
    assert data["data_loaded"] is True
    assert isinstance(data["app_name"], str)
    assert isinstance(data["environment"], str)
    assert "timestamp_utc" in data


def test_failed_initial_load_blocks_data_routes():
    """
    When the initial load fails the service still starts: /health reports
    `degraded` and every state-dependent route answers 503.
    """
    gateway = FailingGateway()
    gateway.fail_on = {"get_collection"}
    app = create_app(workspace=Workspace(gateway, seed_demo_data=False))

    with TestClient(app) as client:
        health = client.get("/health")
        assert health.status_code == HTTPStatus.OK
        assert health.json()["status"] == "degraded"

        assert client.get("/projects").status_code == HTTPStatus.SERVICE_UNAVAILABLE
        assert client.get("/view").status_code == HTTPStatus.SERVICE_UNAVAILABLE

        # Once the backend is reachable again an internal reload recovers.
        gateway.fail_on = set()
        reload = client.post("/internal/reload")
        assert reload.status_code == HTTPStatus.OK
        assert client.get("/projects").status_code == HTTPStatus.OK
