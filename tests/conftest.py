"""
Pytest configuration and fixtures for API testing.

Every test that takes the `storage` (or `client`) fixture runs twice: once
against the in-memory store and once against the SQLAlchemy store on an
in-memory SQLite database.
"""
import itertools

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.session import Base
from app.main import app
from app.storage.database import DatabaseStorage
from app.storage.deps import get_storage
from app.storage.memory import MemoryStorage


@pytest.fixture(params=["memory", "database"])
def storage(request):
    if request.param == "memory":
        store = MemoryStorage()
        store.seed_categories()
        yield store
        return

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    store = DatabaseStorage(session)
    store.seed_categories()
    yield store
    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def client(storage):
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(client):
    """Register and log in a fresh user; returns (user json, auth headers)."""
    counter = itertools.count(1)

    def _make_user(username: str | None = None, password: str = "secret123"):
        username = username or f"user{next(counter)}"
        r = client.post("/api/auth/register", json={
            "username": username,
            "email": f"{username}@example.com",
            "password": password,
            "name": username.title(),
        })
        assert r.status_code == 201, f"Register failed: {r.text}"
        r = client.post("/api/auth/login",
                        json={"username": username, "password": password})
        assert r.status_code == 200, f"Login failed: {r.text}"
        headers = {"Authorization": f"Bearer {r.json()['access_token']}"}
        return client.get("/api/auth/me", headers=headers).json(), headers

    return _make_user


@pytest.fixture
def make_post(client):
    """Create a post as the given user; returns the post json."""
    counter = itertools.count(1)

    def _make_post(headers: dict, **overrides):
        n = next(counter)
        body = {
            "title": f"Post number {n}",
            "content": f"Body of post {n}. " * 20,
            "category": "Python",
        }
        body.update(overrides)
        r = client.post("/api/posts", json=body, headers=headers)
        assert r.status_code == 201, f"Create post failed: {r.text}"
        return r.json()

    return _make_post
