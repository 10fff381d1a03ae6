import pytest
from pymongo import ReturnDocument
from pymongo.errors import AutoReconnect

from app.core.exceptions import PersistenceFailureError
from app.db import store as store_module
from app.db.store import MongoDocumentStore


class FakeCursor:
    def __init__(self, documents):
        self.documents = documents
        self.sort_args = None

    def sort(self, key, direction):
        self.sort_args = (key, direction)
        return self

    async def to_list(self, length=None):
        return self.documents


class FakeCollection:
    def __init__(self, error=None):
        self.error = error
        self.calls = []
        self.cursor = FakeCursor([{"id": "r1"}])
        self.replaced = {"id": "r1", "status": "approved"}

    def _record(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        if self.error:
            raise self.error

    def find(self, *args, **kwargs):
        self._record("find", *args, **kwargs)
        return self.cursor

    async def find_one(self, *args, **kwargs):
        self._record("find_one", *args, **kwargs)
        return {"id": args[0]["id"]}

    async def find_one_and_replace(self, *args, **kwargs):
        self._record("find_one_and_replace", *args, **kwargs)
        return self.replaced

    async def insert_one(self, document):
        self._record("insert_one", document)
        document["_id"] = "object-id"


@pytest.fixture
def collection(monkeypatch):
    fake = FakeCollection()
    monkeypatch.setattr(store_module, "get_collection", lambda name: fake)
    return fake


@pytest.mark.anyio
async def test_update_with_expected_status_conditions_on_status(collection):
    result = await MongoDocumentStore().update(
        "admin-code-requests", "r1", {"_id": "x", "status": "approved"}, expected_status="pending"
    )

    name, args, kwargs = collection.calls[0]
    assert name == "find_one_and_replace"
    assert args[0] == {"id": "r1", "status": "pending"}
    assert args[1] == {"id": "r1", "status": "approved"}
    assert kwargs["projection"] == {"_id": 0}
    assert kwargs["return_document"] == ReturnDocument.AFTER
    assert result == {"id": "r1", "status": "approved"}


@pytest.mark.anyio
async def test_update_without_match_returns_none(collection):
    collection.replaced = None

    assert await MongoDocumentStore().update("admin-code-requests", "r1", {}, expected_status="pending") is None


@pytest.mark.anyio
async def test_get_all_sorted_newest_first(collection):
    documents = await MongoDocumentStore().get("admin-code-requests")

    assert documents == [{"id": "r1"}]
    assert collection.cursor.sort_args == ("requestDate", -1)


@pytest.mark.anyio
async def test_get_one(collection):
    assert await MongoDocumentStore().get("admin-code-requests", "r7") == {"id": "r7"}


@pytest.mark.anyio
async def test_create_assigns_id_and_hides_mongo_key(collection):
    created = await MongoDocumentStore().create("admin-codes", {"code": "ADMIN12345"})

    assert created["code"] == "ADMIN12345"
    assert len(created["id"]) == 32
    assert "_id" not in created


@pytest.mark.parametrize(
    "call",
    [
        lambda s: s.get("admin-code-requests", "r1"),
        lambda s: s.update("admin-code-requests", "r1", {}),
        lambda s: s.create("admin-codes", {}),
        lambda s: s.find("admin-codes", {"requestId": "r1"}),
    ],
)
@pytest.mark.anyio
async def test_mongo_errors_become_persistence_failures(monkeypatch, call):
    fake = FakeCollection(error=AutoReconnect("connection reset"))
    monkeypatch.setattr(store_module, "get_collection", lambda name: fake)

    with pytest.raises(PersistenceFailureError):
        await call(MongoDocumentStore())
