# tests/conftest.py
import copy
import uuid
from typing import Any, Callable, Dict, Optional

import pytest
from fastapi.testclient import TestClient

from teamsync.main import create_app
from teamsync.services.gateway import GatewayError, InMemoryGateway
from teamsync.services.workspace import Workspace

FIXED_NOW = "2025-02-01T10:00:00.000Z"

MANAGER_ID = "m-ann"
MEMBER_ID = "m-ben"
OTHER_ID = "m-cara"
PROJECT_ID = "p-web"
DONE_PROJECT_ID = "p-audit"

SEED: Dict[str, Dict[str, Dict[str, Any]]] = {
    "teamMembers": {
        MANAGER_ID: {"name": "Ann", "email": "ann@example.com", "role": "Manager", "internalTeam": "Engineering"},
        MEMBER_ID: {"name": "Ben", "email": "Ben@Example.com", "role": "Member", "internalTeam": "QA"},
        OTHER_ID: {"name": "Cara", "email": "cara@example.com"},
    },
    "projects": {
        PROJECT_ID: {
            "name": "Website",
            "description": "Relaunch",
            "status": "In Progress",
            "assignees": [MANAGER_ID, MEMBER_ID],
            "dueDate": "2025-03-01",
            "priority": "High",
            "tags": ["web", "q1"],
            "teamLeadId": MEMBER_ID,
            "goals": [
                {
                    "id": "g1",
                    "name": "Launch",
                    "completed": False,
                    "metrics": [{"id": "k1", "fieldName": "Pages", "memberId": MEMBER_ID}],
                }
            ],
            "createdAt": "2025-01-01T09:00:00.000Z",
            "updatedAt": "2025-01-01T09:00:00.000Z",
        },
        DONE_PROJECT_ID: {
            "name": "Audit",
            "status": "Done",
            "assignees": [OTHER_ID],
            "dueDate": "2025-01-15",
            "completionDate": "2025-01-10T12:00:00.000Z",
            "createdAt": "2024-12-01T09:00:00.000Z",
            "updatedAt": "2025-01-10T12:00:00.000Z",
        },
    },
    "attendance": {
        f"{MEMBER_ID}-2025-01-06": {
            "memberId": MEMBER_ID,
            "date": "2025-01-06",
            "status": "Leave",
            "leaveType": "Sick Leave",
        },
        f"{MANAGER_ID}-2025-01-06": {"memberId": MANAGER_ID, "date": "2025-01-06", "status": "Present"},
    },
    "worklogs": {
        "w1": {
            "memberId": MEMBER_ID,
            "projectId": PROJECT_ID,
            "date": "2025-01-06",
            "taskName": "Testing",
            "timeSpentMinutes": 90,
            "updatedAt": "2025-01-06T17:00:00.000Z",
        },
        "w2": {
            "memberId": MANAGER_ID,
            "projectId": PROJECT_ID,
            "date": "2025-01-07",
            "taskName": "Meeting",
            "timeSpentMinutes": 30,
            "updatedAt": "2025-01-07T11:00:00.000Z",
        },
        "w3": {
            "memberId": OTHER_ID,
            "projectId": DONE_PROJECT_ID,
            "date": "2025-01-08",
            "taskName": "Documentation",
            "timeSpentMinutes": 60,
            "updatedAt": "2025-01-08T15:00:00.000Z",
        },
    },
    "notes": {
        "n1": {"title": "Standup", "content": "Ask about QA", "status": "Pending", "userId": MANAGER_ID},
    },
    "activities": {},
    "settings": {"app": {"appName": "TeamSync", "maxTeamMembers": 20}},
}


class FailingGateway(InMemoryGateway):
    """
    In-memory gateway whose calls can be made to fail on demand.

    - `fail_on`: method names that always raise GatewayError
    - `fail_when`: method name -> predicate over the call arguments
    Every call is recorded in `calls` as (method, collection, ...).
    """

    def __init__(self, initial=None) -> None:
        super().__init__(initial)
        self.fail_on: set = set()
        self.fail_when: Dict[str, Callable[..., bool]] = {}
        self.calls: list = []

    def _check(self, method: str, *args) -> None:
        self.calls.append((method, *args))
        if method in self.fail_on:
            raise GatewayError(f"{method} failed (injected)")
        predicate = self.fail_when.get(method)
        if predicate is not None and predicate(*args):
            raise GatewayError(f"{method} failed (injected)")

    def writes(self) -> list:
        return [call for call in self.calls if call[0] != "get_collection"]

    async def get_collection(self, name):
        self._check("get_collection", name)
        return await super().get_collection(name)

    async def set_document(self, collection, doc_id, fields):
        self._check("set_document", collection, doc_id)
        await super().set_document(collection, doc_id, fields)

    async def update_document(self, collection, doc_id, partial):
        self._check("update_document", collection, doc_id)
        await super().update_document(collection, doc_id, partial)

    async def delete_document(self, collection, doc_id):
        self._check("delete_document", collection, doc_id)
        await super().delete_document(collection, doc_id)

    async def batch_write(self, collection, records):
        self._check("batch_write", collection)
        await super().batch_write(collection, records)

    async def batch_delete(self, collection, ids):
        self._check("batch_delete", collection)
        await super().batch_delete(collection, ids)

    async def delete_by_query(self, collection, field, value):
        self._check("delete_by_query", collection, field, value)
        return await super().delete_by_query(collection, field, value)

    async def add_document(self, collection, fields):
        self._check("add_document", collection)
        doc_id = uuid.uuid4().hex
        await InMemoryGateway.set_document(self, collection, doc_id, fields)
        return doc_id


@pytest.fixture
def seed() -> Dict[str, Dict[str, Dict[str, Any]]]:
    return copy.deepcopy(SEED)


@pytest.fixture
def gateway(seed) -> FailingGateway:
    return FailingGateway(seed)


@pytest.fixture
def make_workspace(gateway):
    """
    Factory for a loaded workspace on the shared failing gateway.

    Usage inside an async test: `ws = await make_workspace(user_id=MANAGER_ID)`.
    """

    async def _make(user_id: Optional[str] = MANAGER_ID, seed_demo_data: bool = False) -> Workspace:
        session_scope = {"currentUserId": user_id} if user_id else {}
        workspace = Workspace(
            gateway,
            session_scope=session_scope,
            seed_demo_data=seed_demo_data,
            clock=lambda: FIXED_NOW,
        )
        await workspace.start()
        return workspace

    return _make


def _client_for(workspace: Workspace):
    app = create_app(workspace=workspace)
    return TestClient(app)


@pytest.fixture
def client(gateway):
    """
    TestClient over a fresh, seeded in-memory workspace, logged in as the manager.
    """
    workspace = Workspace(gateway, session_scope={"currentUserId": MANAGER_ID}, seed_demo_data=False)
    with _client_for(workspace) as test_client:
        yield test_client


@pytest.fixture
def member_client(gateway):
    """
    Same as `client` but acting as a plain member.
    """
    workspace = Workspace(gateway, session_scope={"currentUserId": MEMBER_ID}, seed_demo_data=False)
    with _client_for(workspace) as test_client:
        yield test_client
