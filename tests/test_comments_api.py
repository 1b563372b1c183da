"""
API-тесты комментариев: дерево, ответы, удаление с поддеревом
"""
import pytest

from factories import raw_comment


@pytest.fixture
def post_comments(fake_backend):
    tree = [
        raw_comment("c1", raw_comment("c1a", raw_comment("c1a1"))),
        raw_comment("c2", replies=None),
    ]
    fake_backend.add("GET", "/comments/post-1", tree)
    return tree


def fetch_count(fake_backend):
    return sum(1 for m, p, _ in fake_backend.calls if m == "GET" and p == "/comments/post-1")


@pytest.mark.asyncio
async def test_get_tree_cached(client, fake_backend, post_comments):
    first = await client.get("/comments/post-1")
    assert first.status_code == 200
    data = first.json()
    assert data["count"] == 2
    assert data["total"] == 4
    assert data["comments"][1]["replies"] == []

    await client.get("/comments/post-1")
    assert fetch_count(fake_backend) == 1


@pytest.mark.asyncio
async def test_reply_inserted_after_confirmation(client, fake_backend, post_comments):
    await client.get("/comments/post-1")
    fake_backend.add("POST", "/comments/post-1", raw_comment("r1", isAdmin=True, name="Admin"))

    response = await client.post(
        "/comments/post-1", json={"name": "Admin", "message": "Thanks", "parent_id": "c1a"}
    )
    assert response.status_code == 201
    assert response.json()["is_admin"] is True

    tree = (await client.get("/comments/post-1")).json()["comments"]
    assert [r["id"] for r in tree[0]["replies"][0]["replies"]] == ["c1a1", "r1"]
    assert fetch_count(fake_backend) == 1


@pytest.mark.asyncio
async def test_admin_reply_marked_for_backend(client, fake_backend, post_comments):
    fake_backend.add("POST", "/comments/post-1", raw_comment("r1", isAdmin=True, name="Admin"))

    response = await client.post(
        "/comments/post-1",
        json={"name": "Admin", "message": "Hi", "parent_id": "c1", "is_admin": True},
    )
    assert response.status_code == 201
    assert fake_backend.calls[-1] == (
        "POST", "/comments/post-1",
        {"name": "Admin", "message": "Hi", "parent": "c1", "isAdmin": True},
    )


@pytest.mark.asyncio
async def test_regular_comment_not_marked_admin(client, fake_backend, post_comments):
    fake_backend.add("POST", "/comments/post-1", raw_comment("c3"))

    await client.post("/comments/post-1", json={"name": "Guest", "message": "Nice post"})
    assert "isAdmin" not in fake_backend.calls[-1][2]


@pytest.mark.asyncio
async def test_failed_create_leaves_tree_unchanged(client, fake_backend, post_comments):
    await client.get("/comments/post-1")
    fake_backend.add("POST", "/comments/post-1", {"message": "Validation failed"}, status=400)

    response = await client.post("/comments/post-1", json={"name": "A", "message": "B", "parent_id": "c1"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Validation failed"

    data = (await client.get("/comments/post-1")).json()
    assert data["total"] == 4


@pytest.mark.asyncio
async def test_blank_message_rejected(client, fake_backend, post_comments):
    response = await client.post("/comments/post-1", json={"name": "A", "message": "   "})
    assert response.status_code == 422
    assert not fake_backend.called("POST", "/comments/post-1")


@pytest.mark.asyncio
async def test_delete_removes_subtree(client, fake_backend, post_comments):
    await client.get("/comments/post-1")
    fake_backend.add("DELETE", "/comments/c1a", {"message": "deleted"})

    response = await client.delete("/comments/post-1/c1a")
    assert response.status_code == 200
    assert response.json()["message"] == "Comment deleted successfully"

    data = (await client.get("/comments/post-1")).json()
    assert data["total"] == 2
    assert data["comments"][0]["replies"] == []


@pytest.mark.asyncio
async def test_delete_conflict_invalidates_cache(client, fake_backend, post_comments, comment_cache):
    await client.get("/comments/post-1")
    fake_backend.add("DELETE", "/comments/c2", {"message": "Comment not found"}, status=404)

    response = await client.delete("/comments/post-1/c2")
    assert response.status_code == 404
    assert comment_cache.get("post-1") is None

    await client.get("/comments/post-1")
    assert fetch_count(fake_backend) == 2


@pytest.mark.asyncio
async def test_refresh_refetches(client, fake_backend, post_comments):
    await client.get("/comments/post-1")
    response = await client.post("/comments/post-1/refresh")
    assert response.status_code == 200
    assert fetch_count(fake_backend) == 2
