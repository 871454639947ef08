from fastapi.testclient import TestClient

from app.main import app
from app.storage.base import StorageError
from app.storage.deps import get_storage
from app.storage.memory import MemoryStorage


class BrokenStorage(MemoryStorage):
    def get_categories(self):
        raise StorageError("Failed fetching categories")


def test_root_reports_running():
    r = TestClient(app).get("/")
    assert r.status_code == 200
    assert "running" in r.json()["message"]


def test_storage_failure_becomes_500():
    app.dependency_overrides[get_storage] = lambda: BrokenStorage()
    try:
        r = TestClient(app).get("/api/categories")
    finally:
        app.dependency_overrides.clear()
    assert r.status_code == 500
    assert r.json()["detail"] == "Failed fetching categories"


def test_importing_app_registers_every_table():
    from app.db.session import Base
    assert {"users", "posts", "comments", "likes", "categories"} <= set(Base.metadata.tables)
