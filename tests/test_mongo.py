import logging
from unittest.mock import MagicMock, patch

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo import ReturnDocument
from pymongo.errors import ServerSelectionTimeoutError

from todo_api.db import MongoConnection, MongoTodoStore
from todo_api.errors import InvalidTodoId, StoreUnavailableError
from todo_api.main import create_app
from todo_api.settings import Settings

OID = ObjectId("5f43a1b2c3d4e5f6a7b8c9d0")


@pytest.fixture
def mongo_client():
    with patch("todo_api.db.MongoClient") as client_cls:
        yield client_cls.return_value


@pytest.fixture
def collection(mongo_client):
    return mongo_client.__getitem__.return_value.__getitem__.return_value


@pytest.fixture
def store(mongo_client):
    connection = MongoConnection("mongodb://user:secret@db:27017", "todos")
    connection.connect()
    return MongoTodoStore(connection, "todos")


class TestMongoConnection:
    def test_connect_pings_and_marks_ready(self, mongo_client):
        connection = MongoConnection("mongodb://db:27017", "todos")
        assert connection.connect() is True
        assert connection.ready is True
        mongo_client.admin.command.assert_called_with("ping")

    def test_connect_failure_is_logged_and_not_raised(self, mongo_client, caplog):
        mongo_client.admin.command.side_effect = ServerSelectionTimeoutError("no servers")
        connection = MongoConnection("mongodb://user:secret@db:27017", "todos")
        with caplog.at_level(logging.ERROR, logger="todo_api.db"):
            assert connection.connect() is False
        assert connection.ready is False
        assert "Error connecting to MongoDB" in caplog.text
        assert "secret" not in caplog.text

    def test_check_recovers_after_failure(self, mongo_client):
        mongo_client.admin.command.side_effect = [ServerSelectionTimeoutError("down"), {"ok": 1}]
        connection = MongoConnection("mongodb://db:27017", "todos")
        assert connection.connect() is False
        assert connection.check() is True
        assert connection.ready is True

    def test_collection_without_client_raises(self):
        with patch("todo_api.db.MongoClient", side_effect=ServerSelectionTimeoutError("bad uri")):
            connection = MongoConnection("mongodb://db:27017", "todos")
            connection.connect()
        with pytest.raises(StoreUnavailableError):
            connection.collection("todos")

    def test_close_releases_client(self, mongo_client):
        connection = MongoConnection("mongodb://db:27017", "todos")
        connection.connect()
        connection.close()
        mongo_client.close.assert_called_once_with()
        assert connection.ready is False


class TestMongoTodoStore:
    def test_find_all(self, store, collection):
        collection.find.return_value = [{"_id": OID, "title": "a", "done": False}]
        assert store.find_all() == [{"id": str(OID), "title": "a", "done": False}]
        collection.find.assert_called_once_with({})

    def test_find_by_id(self, store, collection):
        collection.find_one.return_value = {"_id": OID, "title": "a", "done": True}
        assert store.find_by_id(str(OID)) == {"id": str(OID), "title": "a", "done": True}
        collection.find_one.assert_called_once_with({"_id": OID})

    def test_find_by_id_missing(self, store, collection):
        collection.find_one.return_value = None
        assert store.find_by_id(str(OID)) is None

    def test_malformed_id_never_reaches_driver(self, store, collection):
        with pytest.raises(InvalidTodoId):
            store.find_by_id("wrong id")
        collection.find_one.assert_not_called()

    def test_create(self, store, collection):
        collection.insert_one.return_value = MagicMock(inserted_id=OID)
        created = store.create({"title": "a", "done": False})
        assert created == {"id": str(OID), "title": "a", "done": False}
        collection.insert_one.assert_called_once_with({"title": "a", "done": False})

    def test_update_returns_document_after_update(self, store, collection):
        collection.find_one_and_update.return_value = {"_id": OID, "title": "b", "done": True}
        updated = store.update_by_id(str(OID), {"title": "b", "done": True})
        assert updated == {"id": str(OID), "title": "b", "done": True}
        collection.find_one_and_update.assert_called_once_with(
            {"_id": OID},
            {"$set": {"title": "b", "done": True}},
            return_document=ReturnDocument.AFTER,
        )

    def test_update_missing(self, store, collection):
        collection.find_one_and_update.return_value = None
        assert store.update_by_id(str(OID), {"title": "b", "done": True}) is None

    def test_delete(self, store, collection):
        collection.find_one_and_delete.return_value = {"_id": OID, "title": "a", "done": False}
        assert store.delete_by_id(str(OID)) == {"id": str(OID), "title": "a", "done": False}
        collection.find_one_and_delete.assert_called_once_with({"_id": OID})

    def test_delete_missing(self, store, collection):
        collection.find_one_and_delete.return_value = None
        assert store.delete_by_id(str(OID)) is None


class TestDegradedStartup:
    def test_app_starts_and_requests_fail_individually(self, mongo_client, collection):
        mongo_client.admin.command.side_effect = ServerSelectionTimeoutError("No servers found yet")
        collection.find.side_effect = ServerSelectionTimeoutError("No servers found yet")
        app = create_app(Settings(persistence_backend="mongo"))

        with TestClient(app) as client:
            health = client.get("/")
            assert health.status_code == 503
            assert health.json() == {"message": "Degraded", "backend": "mongo", "store_ready": False}

            res = client.get("/todos/")
            assert res.status_code == 500
            assert res.json() == {"message": "No servers found yet"}

            # Malformed ids still resolve to 404 without touching the driver
            assert client.get("/todos/wrong id").status_code == 404
