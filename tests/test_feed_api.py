"""Tests for viewer-filtered feed and comments."""
import pytest

from src.auth import sign_token


@pytest.mark.asyncio
async def test_anonymous_feed_is_unfiltered(client):
    resp = await client.get("/api/v1/feed")
    assert resp.status_code == 200
    assert [p["postId"] for p in resp.json()["posts"]] == ["p3", "p2", "p1"]


@pytest.mark.asyncio
async def test_feed_hides_blocked_authors(client, alice_auth):
    await client.post("/api/v1/users/bob/block", headers=alice_auth)

    resp = await client.get("/api/v1/feed", headers=alice_auth)
    posts = resp.json()["posts"]
    assert [p["postId"] for p in posts] == ["p3", "p2"]
    assert all(p["userId"] != "bob" for p in posts)


@pytest.mark.asyncio
async def test_block_only_affects_blocker(client, alice_auth, make_auth):
    await client.post("/api/v1/users/bob/block", headers=alice_auth)

    resp = await client.get("/api/v1/feed", headers=make_auth("carol"))
    assert len(resp.json()["posts"]) == 3


@pytest.mark.asyncio
async def test_feed_pagination(client):
    resp = await client.get("/api/v1/feed?offset=1&limit=1")
    assert [p["postId"] for p in resp.json()["posts"]] == ["p2"]


@pytest.mark.asyncio
async def test_unblock_restores_feed(client, alice_auth):
    await client.post("/api/v1/users/bob/block", headers=alice_auth)
    await client.delete("/api/v1/users/bob/block", headers=alice_auth)

    resp = await client.get("/api/v1/feed", headers=alice_auth)
    assert resp.json()["count"] == 3


@pytest.mark.asyncio
async def test_comments_hide_blocked_authors(client, alice_auth):
    await client.post("/api/v1/users/carol/block", headers=alice_auth)

    resp = await client.get("/api/v1/posts/p3/comments", headers=alice_auth)
    assert resp.status_code == 200
    assert [c["commentId"] for c in resp.json()["comments"]] == ["c2"]


@pytest.mark.asyncio
async def test_comments_oldest_first(client):
    resp = await client.get("/api/v1/posts/p3/comments")
    assert [c["commentId"] for c in resp.json()["comments"]] == ["c1", "c2"]


@pytest.mark.asyncio
async def test_comments_on_missing_post(client):
    resp = await client.get("/api/v1/posts/nope/comments")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_expired_token_is_not_treated_as_anonymous(client, alice_auth):
    await client.post("/api/v1/users/bob/block", headers=alice_auth)

    expired = {"Authorization": f"Bearer {sign_token('alice', ttl=-10)}"}
    resp = await client.get("/api/v1/feed", headers=expired)
    assert resp.status_code == 401
    assert "posts" not in resp.json()

    resp = await client.get("/api/v1/posts/p3/comments", headers=expired)
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_garbage_token_is_unauthorized(client):
    resp = await client.get("/api/v1/feed", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
