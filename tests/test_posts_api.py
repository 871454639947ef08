def test_create_post_requires_auth(client):
    r = client.post("/api/posts", json={
        "title": "Hi", "content": "Body", "category": "Python"})
    assert r.status_code == 401


def test_create_post_derives_slug_and_excerpt(client, make_user, make_post):
    user, headers = make_user()
    content = "x" * 300
    post = make_post(headers, title="Hello World!", content=content)
    assert post["slug"] == "hello-world"
    assert post["excerpt"] == "x" * 150 + "..."
    assert post["author_id"] == user["id"]
    assert post["like_count"] == 0
    assert post["comment_count"] == 0


def test_explicit_slug_and_excerpt_are_kept(client, make_user, make_post):
    _, headers = make_user()
    post = make_post(headers, slug="My-Custom-Slug", excerpt="Short")
    assert post["slug"] == "my-custom-slug"
    assert post["excerpt"] == "Short"


def test_duplicate_slug_is_rejected(client, make_user, make_post):
    _, headers = make_user()
    make_post(headers, title="Same title")
    r = client.post("/api/posts", headers=headers, json={
        "title": "Same title", "content": "Body", "category": "Python"})
    assert r.status_code == 400


def test_oversized_post_is_rejected(client, make_user):
    _, headers = make_user()
    r = client.post("/api/posts", headers=headers, json={
        "title": "Huge", "content": "x" * 50001, "category": "Python"})
    assert r.status_code == 400


def test_get_post_by_slug_includes_author(client, make_user, make_post):
    _, headers = make_user("writer")
    post = make_post(headers)

    r = client.get(f"/api/posts/{post['slug']}")
    assert r.status_code == 200
    data = r.json()
    assert data["author"]["username"] == "writer"
    assert "password" not in data["author"]
    assert data["liked"] is None

    r = client.get(f"/api/posts/{post['slug']}", headers=headers)
    assert r.json()["liked"] is False


def test_missing_post_is_404(client):
    assert client.get("/api/posts/nope").status_code == 404


def test_list_posts_paginates_newest_first(client, make_user, make_post):
    _, headers = make_user()
    created = [make_post(headers) for _ in range(3)]

    r = client.get("/api/posts", params={"limit": 2})
    assert r.status_code == 200
    data = r.json()
    assert data["total"] == 3
    assert data["page"] == 1
    assert data["limit"] == 2
    assert data["total_pages"] == 2
    assert [p["id"] for p in data["posts"]] == [created[2]["id"], created[1]["id"]]

    r = client.get("/api/posts", params={"limit": 2, "page": 2})
    assert [p["id"] for p in r.json()["posts"]] == [created[0]["id"]]


def test_list_posts_filters_by_category(client, make_user, make_post):
    _, headers = make_user()
    make_post(headers, category="Node.js")
    make_post(headers, category="Python")

    by_slug = client.get("/api/posts", params={"category": "nodejs"}).json()
    by_name = client.get("/api/posts", params={"category": "Node.js"}).json()
    assert by_slug["total"] == 1
    assert by_slug["posts"][0]["category"] == "Node.js"
    assert by_name["total"] == 1


def test_featured_posts_are_three_most_recent(client, make_user, make_post):
    _, headers = make_user()
    created = [make_post(headers) for _ in range(4)]
    r = client.get("/api/posts/featured")
    assert r.status_code == 200
    assert [p["id"] for p in r.json()] == [p["id"] for p in reversed(created[1:])]


def test_only_author_can_update(client, make_user, make_post):
    _, author = make_user()
    _, stranger = make_user()
    post = make_post(author)

    r = client.put(f"/api/posts/{post['id']}", headers=stranger, json={"title": "Hacked"})
    assert r.status_code == 403

    r = client.put(f"/api/posts/{post['id']}", headers=author, json={"title": "Edited"})
    assert r.status_code == 200
    assert r.json()["title"] == "Edited"
    assert r.json()["slug"] == post["slug"]


def test_update_missing_post_is_404(client, make_user):
    _, headers = make_user()
    r = client.put("/api/posts/999", headers=headers, json={"title": "x"})
    assert r.status_code == 404


def test_update_to_taken_slug_is_rejected(client, make_user, make_post):
    _, headers = make_user()
    first = make_post(headers)
    second = make_post(headers)
    r = client.put(f"/api/posts/{second['id']}", headers=headers,
                   json={"slug": first["slug"]})
    assert r.status_code == 400


def test_only_author_can_delete(client, make_user, make_post):
    _, author = make_user()
    _, stranger = make_user()
    post = make_post(author)

    assert client.delete(f"/api/posts/{post['id']}", headers=stranger).status_code == 403
    assert client.delete(f"/api/posts/{post['id']}", headers=author).status_code == 204
    assert client.get(f"/api/posts/{post['slug']}").status_code == 404


def test_timestamps_are_serialized_as_utc(client, make_user, make_post):
    _, headers = make_user()
    post = make_post(headers)

    data = client.get(f"/api/posts/{post['slug']}").json()
    assert post["created_at"].endswith("Z")
    assert data["created_at"].endswith("Z")
    assert data["updated_at"].endswith("Z")
    assert data["author"]["created_at"].endswith("Z")
