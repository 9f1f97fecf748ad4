"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("LOG_LEVEL", "WARNING")

from app.config import Settings
from app.main import create_app
from app.subscribers import JsonFileSubscriberStore


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "data" / "subscriptions.json"


@pytest.fixture
async def json_store(data_file):
    store = JsonFileSubscriberStore(str(data_file))
    await store.init()
    yield store
    await store.close()


@pytest.fixture
def make_settings(data_file):
    def _make(**overrides):
        values = {
            "store_backend": "json",
            "data_file": str(data_file),
            "admin_token": None,
            "cors_origins": None,
            "track_ip": True,
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def make_client(make_settings):
    """Build a TestClient; lifespan opens the store on enter."""
    clients = []

    def _make(store=None, **overrides):
        app = create_app(make_settings(**overrides), store=store)
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()
