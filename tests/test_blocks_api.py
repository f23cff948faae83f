"""Tests for the blocking API."""
import pytest


@pytest.mark.asyncio
async def test_block_and_check(client, alice_auth):
    resp = await client.post("/api/v1/users/bob/block", headers=alice_auth)
    assert resp.status_code == 200
    assert resp.json() == {
        "blocked": True,
        "message": "User blocked successfully. You won't see their content anymore.",
    }

    check = await client.get("/api/v1/users/bob/blocked", headers=alice_auth)
    assert check.json()["blocked"] is True


@pytest.mark.asyncio
async def test_block_is_idempotent(client, alice_auth):
    await client.post("/api/v1/users/bob/block", headers=alice_auth)
    resp = await client.post("/api/v1/users/bob/block", headers=alice_auth)
    assert resp.status_code == 200

    listing = await client.get("/api/v1/me/blocked", headers=alice_auth)
    assert listing.json()["count"] == 1


@pytest.mark.asyncio
async def test_unblock(client, alice_auth):
    await client.post("/api/v1/users/bob/block", headers=alice_auth)
    resp = await client.delete("/api/v1/users/bob/block", headers=alice_auth)
    assert resp.status_code == 200
    assert resp.json()["message"] == "User unblocked successfully."

    check = await client.get("/api/v1/users/bob/blocked", headers=alice_auth)
    assert check.json()["blocked"] is False


@pytest.mark.asyncio
async def test_unblock_never_blocked(client, alice_auth):
    resp = await client.delete("/api/v1/users/carol/block", headers=alice_auth)
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_cannot_block_self(client, alice_auth):
    resp = await client.post("/api/v1/users/alice/block", headers=alice_auth)
    assert resp.status_code == 400
    assert resp.json() == {
        "error": "validation_error",
        "message": "Failed to block user: cannot block yourself",
    }


@pytest.mark.asyncio
async def test_my_blocked_lists_only_mine(client, alice_auth, bob_auth):
    await client.post("/api/v1/users/bob/block", headers=alice_auth)
    await client.post("/api/v1/users/carol/block", headers=bob_auth)

    resp = await client.get("/api/v1/me/blocked", headers=alice_auth)
    data = resp.json()
    assert data["count"] == 1
    assert data["blocked_users"][0]["user_id"] == "bob"
    assert data["blocked_users"][0]["display_name"] == "Bob"


@pytest.mark.asyncio
async def test_blocking_requires_auth(client):
    resp = await client.post("/api/v1/users/bob/block")
    assert resp.status_code == 401
