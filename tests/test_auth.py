"""Tests for bearer token verification."""
import json
import time

import pytest

from config.settings import settings
from src.auth import _b64url, _signature, _verify, sign_token


def test_round_trip_claims():
    payload = _verify(sign_token("alice", "Alice"))
    assert payload["sub"] == "alice"
    assert payload["name"] == "Alice"
    assert payload["type"] == "access"


def test_expired_token_rejected():
    assert _verify(sign_token("alice", ttl=-10)) is None


def test_tampered_token_rejected():
    header, body, sig = sign_token("alice").split(".")
    forged = sign_token("mallory").split(".")[1]
    assert _verify(f"{header}.{forged}.{sig}") is None


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b", "a.b.c", "a.!!!.c"])
def test_garbage_rejected(token):
    assert _verify(token) is None


def test_other_secret_rejected(monkeypatch):
    token = sign_token("alice")
    monkeypatch.setattr(settings, "JWT_SECRET", "rotated")
    assert _verify(token) is None


@pytest.mark.asyncio
async def test_expired_token_is_unauthorized(client):
    headers = {"Authorization": f"Bearer {sign_token('alice', ttl=-10)}"}
    resp = await client.get("/api/v1/me/blocked", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["error"] == "Authentication required"


def _provider_token(claims: dict) -> str:
    """A token shaped like the auth provider's: no ``type`` or ``jti`` claims."""
    header = _b64url(json.dumps({"alg": "HS256", "typ": "JWT"}).encode())
    body = _b64url(json.dumps(claims).encode())
    return f"{header}.{body}.{_b64url(_signature(f'{header}.{body}'.encode()))}"


@pytest.mark.asyncio
async def test_provider_token_without_type_accepted(client):
    token = _provider_token({"sub": "alice", "name": "Alice", "exp": int(time.time()) + 60})
    resp = await client.get("/api/v1/me/blocked", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["count"] == 0


@pytest.mark.asyncio
async def test_refresh_token_rejected(client):
    token = _provider_token({"sub": "alice", "type": "refresh", "exp": int(time.time()) + 60})
    resp = await client.get("/api/v1/me/blocked", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_token_without_subject_rejected(client):
    token = _provider_token({"name": "Nobody", "exp": int(time.time()) + 60})
    resp = await client.get("/api/v1/feed", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
