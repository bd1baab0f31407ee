# tests/test_sql_gateway.py
import pytest

from teamsync.db.session import build_engine, build_sessionmaker, init_db
from teamsync.services.gateway import DocumentNotFoundError, GatewayError
from teamsync.services.sql_gateway import SqlDocumentGateway
from teamsync.services.workspace import Workspace
from teamsync.schemas.base import Collection


async def _gateway(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'teamsync.db'}")
    await init_db(engine)
    return engine, SqlDocumentGateway(build_sessionmaker(engine))


@pytest.mark.asyncio
async def test_set_get_update_delete(tmp_path):
    engine, gateway = await _gateway(tmp_path)
    try:
        await gateway.set_document("notes", "n1", {"id": "ignored", "title": "A", "tags": ["x"]})
        await gateway.update_document("notes", "n1", {"title": "B", "dueDate": None})

        docs = await gateway.get_collection("notes")
        assert docs == [{"id": "n1", "title": "B", "tags": ["x"], "dueDate": None}]

        await gateway.delete_document("notes", "n1")
        await gateway.delete_document("notes", "n1")  # missing is fine
        assert await gateway.get_collection("notes") == []
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_update_missing_document_raises(tmp_path):
    engine, gateway = await _gateway(tmp_path)
    try:
        with pytest.raises(DocumentNotFoundError):
            await gateway.update_document("notes", "nope", {"title": "B"})
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_batch_write_is_all_or_nothing(tmp_path):
    engine, gateway = await _gateway(tmp_path)
    try:
        with pytest.raises(GatewayError):
            await gateway.batch_write("worklogs", [{"id": "w1", "memberId": "m1"}, {"memberId": "m2"}])
        assert await gateway.get_collection("worklogs") == []

        await gateway.batch_write(
            "worklogs",
            [{"id": "w1", "memberId": "m1"}, {"id": "w2", "memberId": "m2"}, {"id": "w3", "memberId": "m1"}],
        )
        assert await gateway.delete_by_query("worklogs", "memberId", "m1") == 2
        assert [d["id"] for d in await gateway.get_collection("worklogs")] == ["w2"]

        await gateway.batch_delete("worklogs", ["w2"])
        assert await gateway.get_collection("worklogs") == []
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_collection_is_read_back_in_insertion_order(tmp_path):
    engine, gateway = await _gateway(tmp_path)
    try:
        await gateway.batch_write(
            "teamMembers",
            [{"id": "zed", "name": "Z"}, {"id": "amy", "name": "A"}, {"id": "mo", "name": "M"}],
        )
        await gateway.set_document("teamMembers", "bob", {"name": "B"})
        # Rewriting an existing document keeps its position.
        await gateway.set_document("teamMembers", "zed", {"name": "Z2"})

        docs = await gateway.get_collection("teamMembers")
        assert [d["id"] for d in docs] == ["zed", "amy", "mo", "bob"]
        assert docs[0]["name"] == "Z2"
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_add_document_assigns_id(tmp_path):
    engine, gateway = await _gateway(tmp_path)
    try:
        doc_id = await gateway.add_document("activities", {"type": "login"})
        assert await gateway.get_collection("activities") == [{"id": doc_id, "type": "login"}]
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_workspace_runs_on_sql_backend(tmp_path):
    engine, gateway = await _gateway(tmp_path)
    ws = Workspace(gateway, seed_demo_data=True, engine=engine)
    try:
        await ws.start()
        assert ws.store.count(Collection.TEAM_MEMBERS) == 5

        names = [m.name for m in ws.store.team_members]
        assert names == [f"Team Member {i}" for i in range(1, 6)]

        manager = ws.store.team_members[0]
        assert manager.is_manager
        ws.session.save_user(manager.id)
        result = await ws.coordinator.delete_team_member(manager.id)
        assert result.ok

        again = Workspace(gateway, seed_demo_data=False)
        await again.start()
        assert again.store.count(Collection.TEAM_MEMBERS) == 4
    finally:
        await ws.close()
