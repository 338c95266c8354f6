import mongomock
import pytest
from fastapi.testclient import TestClient

import database
import votes
from auth import Actor, resolve_actor
from database import create_document


@pytest.fixture
def store(monkeypatch):
    """Fresh in-memory Mongo database patched in for every test.

    The vote debounce window is disabled so tests can vote back-to-back;
    debounce tests turn it back on explicitly.
    """
    mock_db = mongomock.MongoClient().db
    monkeypatch.setattr(database, "db", mock_db)
    votes.debouncer.reset()
    monkeypatch.setattr(votes.debouncer, "window", 0)
    yield mock_db
    votes.debouncer.reset()


@pytest.fixture
def make_user(store):
    counter = {"n": 0}

    def _make(name=None, role="user", department=None) -> Actor:
        counter["n"] += 1
        name = name or f"user{counter['n']}"
        user_id = create_document(
            "user",
            {"name": name, "email": f"{name.lower()}@campus.edu", "role": role, "department": department},
        )
        return resolve_actor(user_id)

    return _make


@pytest.fixture
def client(store, monkeypatch):
    monkeypatch.setenv("EXPIRY_SWEEP_ENABLED", "0")
    from main import app

    return TestClient(app)
