# tests/test_internal_auth_dependency.py
from http import HTTPStatus

from teamsync.api.dependencies import internal_auth as auth_module


class DummySettingsProd:
    APP_ENV = "prod"
    INTERNAL_API_KEY = "supersecret"


class DummySettingsProdMissingKey:
    APP_ENV = "prod"
    INTERNAL_API_KEY = None


def test_internal_endpoint_open_locally_without_key(client):
    resp = client.post("/internal/reload")
    assert resp.status_code == HTTPStatus.OK
    assert "revision" in resp.json()


def test_internal_endpoint_401_when_key_missing_in_prod(monkeypatch, client):
    monkeypatch.setattr(auth_module, "get_settings", lambda: DummySettingsProd())

    resp = client.post("/internal/reload")
    assert resp.status_code == HTTPStatus.UNAUTHORIZED
    assert "invalid or missing" in resp.json()["detail"].lower()


def test_internal_endpoint_401_when_key_wrong_in_prod(monkeypatch, client):
    monkeypatch.setattr(auth_module, "get_settings", lambda: DummySettingsProd())

    resp = client.post("/internal/reload", headers={"X-Internal-Api-Key": "wrong-key"})
    assert resp.status_code == HTTPStatus.UNAUTHORIZED


def test_internal_endpoint_200_when_key_correct_in_prod(monkeypatch, client):
    monkeypatch.setattr(auth_module, "get_settings", lambda: DummySettingsProd())

    resp = client.post("/internal/reload", headers={"X-Internal-Api-Key": "supersecret"})
    assert resp.status_code == HTTPStatus.OK


def test_internal_endpoint_500_when_key_not_configured_in_prod(monkeypatch, client):
    monkeypatch.setattr(auth_module, "get_settings", lambda: DummySettingsProdMissingKey())

    resp = client.post("/internal/reload")
    assert resp.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
