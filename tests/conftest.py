import mongomock
import pytest
from fastapi.testclient import TestClient

from database import ResortDatabase
from main import app


@pytest.fixture
def store():
    client = mongomock.MongoClient()
    store = ResortDatabase(client["marriottResort"], client=client)
    store.ensure_indexes()
    return store


@pytest.fixture
def client(store):
    app.state.store = store
    with TestClient(app) as c:
        yield c
    app.state.store = None
