# tests/test_session_api.py
from http import HTTPStatus

from conftest import MANAGER_ID, MEMBER_ID


def test_session_reports_acting_user(client):
    response = client.get("/session")

    assert response.status_code == HTTPStatus.OK
    assert response.json() == {"currentUserId": MANAGER_ID, "currentView": "dashboard", "theme": None}


def test_login_is_case_insensitive_and_logged(client):
    response = client.post("/session/login", json={"email": "BEN@EXAMPLE.COM"})

    assert response.status_code == HTTPStatus.OK
    assert response.json()["id"] == MEMBER_ID
    assert client.get("/session").json()["currentUserId"] == MEMBER_ID
    assert client.get("/view").json()["activityFeed"][0]["type"] == "login"


def test_login_with_unknown_email_returns_404(client):
    response = client.post("/session/login", json={"email": "nobody@example.com"})
    assert response.status_code == HTTPStatus.NOT_FOUND


def test_navigation_and_theme(client):
    assert client.put("/session/view", json={"view": "notes"}).json()["currentView"] == "notes"
    assert client.put("/session/theme", json={"theme": "dark"}).json()["theme"] == "dark"

    view = client.get("/view").json()
    assert view["view"] == "notes"
    assert view["theme"] == "dark"


def test_switch_user_and_logout(client):
    assert client.post("/session/switch-user", json={"memberId": MEMBER_ID}).status_code == HTTPStatus.OK
    assert client.get("/view").json()["currentUserName"] == "Ben"

    assert client.post("/session/switch-user", json={"memberId": "ghost"}).status_code == HTTPStatus.NOT_FOUND

    assert client.post("/session/logout").json()["currentUserId"] is None
