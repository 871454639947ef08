def register(client, **overrides):
    body = {"username": "Alice", "email": "alice@example.com",
            "password": "secret123", "name": "Alice"}
    body.update(overrides)
    return client.post("/api/auth/register", json=body)


def test_register_returns_account_without_password(client):
    r = register(client)
    assert r.status_code == 201
    data = r.json()
    assert data["username"] == "alice"
    assert data["email"] == "alice@example.com"
    assert "password" not in data


def test_register_rejects_duplicate_username(client):
    register(client)
    r = register(client, email="other@example.com")
    assert r.status_code == 400
    assert r.json()["detail"] == "Username already exists"


def test_register_rejects_duplicate_email(client):
    register(client)
    r = register(client, username="bob")
    assert r.status_code == 400


def test_register_validates_fields(client):
    assert register(client, password="123").status_code == 422
    assert register(client, email="not-an-email").status_code == 422
    assert register(client, username="ab").status_code == 422


def test_login_and_me(client):
    register(client)
    r = client.post("/api/auth/login",
                    json={"username": "alice", "password": "secret123"})
    assert r.status_code == 200
    token = r.json()["access_token"]
    assert r.json()["token_type"] == "bearer"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["username"] == "alice"


def test_login_with_wrong_password(client):
    register(client)
    r = client.post("/api/auth/login",
                    json={"username": "alice", "password": "wrong-password"})
    assert r.status_code == 401


def test_me_requires_valid_token(client):
    assert client.get("/api/auth/me").status_code == 401
    r = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401
