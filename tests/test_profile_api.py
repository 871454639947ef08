import pytest
from fastapi import HTTPException

from app.models.base import utcnow
from app.schemas.profile_schema import ProfileUpdate
from app.services import profile as profile_service
from app.storage.records import UserRecord


def test_public_profile_hides_email_and_password(client, make_user):
    user, _ = make_user("writer")
    r = client.get(f"/api/users/{user['id']}")
    assert r.status_code == 200
    data = r.json()
    assert data["username"] == "writer"
    assert "email" not in data
    assert "password" not in data


def test_missing_profile_is_404(client):
    assert client.get("/api/users/999").status_code == 404
    assert client.get("/api/users/999/posts").status_code == 404


def test_update_own_profile(client, make_user):
    user, headers = make_user()
    r = client.put("/api/users/me", headers=headers,
                   json={"bio": "I write things", "avatar_url": "https://img/a.png"})
    assert r.status_code == 200
    assert r.json()["bio"] == "I write things"
    assert r.json()["name"] == user["name"]

    profile = client.get(f"/api/users/{user['id']}").json()
    assert profile["avatar_url"] == "https://img/a.png"


def test_update_profile_requires_auth(client):
    assert client.put("/api/users/me", json={"bio": "x"}).status_code == 401


def test_posts_by_author(client, make_user, make_post):
    alice, alice_headers = make_user()
    _, bob_headers = make_user()
    first = make_post(alice_headers)
    make_post(bob_headers)
    second = make_post(alice_headers)

    r = client.get(f"/api/users/{alice['id']}/posts")
    assert r.status_code == 200
    assert [p["id"] for p in r.json()] == [second["id"], first["id"]]


def test_null_name_leaves_name_unchanged(client, make_user):
    user, headers = make_user()
    r = client.put("/api/users/me", headers=headers,
                   json={"name": None, "bio": "still here"})
    assert r.status_code == 200
    assert r.json()["name"] == user["name"]
    assert r.json()["bio"] == "still here"


def test_update_profile_service_only_touches_sent_fields(storage):
    user = storage.create_user("alice", "alice@example.com", "hash", "Alice", bio="old")
    updated = profile_service.update_profile(
        storage, ProfileUpdate(avatar_url="https://img/a.png"), user)
    assert updated.avatar_url == "https://img/a.png"
    assert updated.bio == "old"
    assert updated.name == "Alice"


def test_update_profile_service_for_missing_user_is_404(storage):
    ghost = UserRecord(id=999, username="ghost", email="ghost@example.com",
                       password="hash", name="Ghost", bio="", avatar_url=None,
                       created_at=utcnow())
    with pytest.raises(HTTPException) as exc:
        profile_service.update_profile(storage, ProfileUpdate(bio="x"), ghost)
    assert exc.value.status_code == 404
