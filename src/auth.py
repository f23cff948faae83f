"""Caller identity from the authentication provider's bearer tokens.

The provider signs HS256 JWTs with a shared secret; ``sub`` is the stable
user id and ``name`` the display name. This module only checks signature and
expiry. ``sign_token`` exists for service-to-service calls and local tooling.
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time
import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from config.settings import settings

_JWT_ALGO = "HS256"
_ACCESS_TTL = 3600 * 24 * 7  # 7 days


@dataclass(frozen=True)
class Caller:
    user_id: str
    display_name: Optional[str] = None


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


def _b64url_decode(s: str) -> bytes:
    s += "=" * (-len(s) % 4)
    return base64.urlsafe_b64decode(s)


def _signature(sig_input: bytes) -> bytes:
    return hmac.new(settings.JWT_SECRET.encode(), sig_input, hashlib.sha256).digest()


def sign_token(user_id: str, display_name: Optional[str] = None, ttl: int = _ACCESS_TTL) -> str:
    now = int(time.time())
    payload = {"sub": user_id, "iat": now, "exp": now + ttl, "type": "access", "jti": uuid.uuid4().hex[:8]}
    if display_name:
        payload["name"] = display_name
    header = _b64url(json.dumps({"alg": _JWT_ALGO, "typ": "JWT"}).encode())
    body = _b64url(json.dumps(payload).encode())
    sig = _signature(f"{header}.{body}".encode())
    return f"{header}.{body}.{_b64url(sig)}"


def _verify(token: str) -> Optional[dict]:
    parts = token.split(".")
    if len(parts) != 3:
        return None
    try:
        expected = _signature(f"{parts[0]}.{parts[1]}".encode())
        if not hmac.compare_digest(expected, _b64url_decode(parts[2])):
            return None
        payload = json.loads(_b64url_decode(parts[1]))
    except ValueError:  # bad base64 / JSON / utf-8
        return None
    if not isinstance(payload, dict) or payload.get("exp", 0) < time.time():
        return None
    return payload


# ---- FastAPI dependencies ----

_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Optional[Caller]:
    """The caller, or None when no credentials were sent.

    Credentials that fail verification are a 401, never an anonymous caller.
    """
    if not creds:
        return None
    payload = _verify(creds.credentials)
    if not payload or payload.get("type") == "refresh" or not payload.get("sub"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return Caller(user_id=str(payload["sub"]), display_name=payload.get("name"))


async def require_user(caller: Optional[Caller] = Depends(get_current_user)) -> Caller:
    if not caller:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return caller


def require_admin(x_admin_key: str = Header(None)) -> None:
    """Verify the moderator API key (timing-safe)."""
    expected = settings.ADMIN_API_KEY
    if not expected:
        raise HTTPException(503, "Admin endpoints disabled")
    if not x_admin_key or not hmac.compare_digest(x_admin_key, expected):
        raise HTTPException(403, "Invalid admin key")
