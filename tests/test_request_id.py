"""Tests for request ID tracing middleware."""
import pytest


@pytest.mark.asyncio
async def test_response_includes_request_id(client):
    """Every response should have X-Request-ID header."""
    resp = await client.get("/health")
    assert resp.json()["status"] == "ok"
    rid = resp.headers["x-request-id"]
    assert len(rid) == 36  # UUID format


@pytest.mark.asyncio
async def test_client_request_id_honored(client):
    custom_id = "report-trace-12345"
    resp = await client.get("/health", headers={"X-Request-ID": custom_id})
    assert resp.headers["x-request-id"] == custom_id


@pytest.mark.asyncio
async def test_error_responses_carry_request_id(client):
    resp = await client.post("/api/v1/users/bob/block")
    assert resp.status_code == 401
    assert "x-request-id" in resp.headers


@pytest.mark.asyncio
async def test_unique_ids_per_request(client):
    r1 = await client.get("/ready")
    r2 = await client.get("/ready")
    assert r1.json() == {"ready": True}
    assert r1.headers["x-request-id"] != r2.headers["x-request-id"]
