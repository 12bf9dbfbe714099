"""
Tests for the permit store connection helpers.
"""

import pytest
from unittest.mock import MagicMock
from pymongo import ASCENDING
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from permit_sync.repositories import mongo_client


@pytest.fixture(autouse=True)
def reset_client(monkeypatch):
    monkeypatch.setattr(mongo_client, "_client", None)
    monkeypatch.setattr(mongo_client, "_database", None)


class TestConnection:

    def test_client_is_shared(self, monkeypatch):
        factory = MagicMock()
        monkeypatch.setattr(mongo_client, "MongoClient", factory)

        first = mongo_client.get_client()
        second = mongo_client.get_client()

        assert first is second
        factory.assert_called_once()
        factory.return_value.admin.command.assert_called_once_with("ping")

    def test_unreachable_store_raises(self, monkeypatch):
        factory = MagicMock()
        factory.return_value.admin.command.side_effect = ConnectionFailure("refused")
        monkeypatch.setattr(mongo_client, "MongoClient", factory)

        with pytest.raises(ConnectionFailure):
            mongo_client.get_client()

        factory.return_value.close.assert_called_once()
        assert mongo_client._client is None

    def test_close_connection_resets(self, monkeypatch):
        client = MagicMock()
        monkeypatch.setattr(mongo_client, "_client", client)

        mongo_client.close_connection()
        mongo_client.close_connection()

        client.close.assert_called_once()
        assert mongo_client._client is None


class TestIndexesAndHealth:

    def test_create_indexes(self, monkeypatch):
        permits = MagicMock()
        monkeypatch.setattr(mongo_client, "get_collection", lambda name=None: permits)

        mongo_client.create_indexes()

        permits.create_index.assert_any_call([("permit_id", ASCENDING)], unique=True)
        permits.create_index.assert_any_call([("permit_tracking.tracking_id", ASCENDING)])
        assert permits.create_index.call_count == len(mongo_client.PERMIT_INDEXES)

    def test_healthy(self, monkeypatch):
        permits = MagicMock()
        permits.estimated_document_count.return_value = 42
        monkeypatch.setattr(mongo_client, "get_collection", lambda name=None: permits)

        assert mongo_client.health_check()["permits"] == 42

    def test_unhealthy(self, monkeypatch):
        def unreachable(name=None):
            raise ServerSelectionTimeoutError("no servers")

        monkeypatch.setattr(mongo_client, "get_collection", unreachable)

        health = mongo_client.health_check()

        assert health["status"] == "unhealthy"
        assert "no servers" in health["error"]
