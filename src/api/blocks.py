"""Blocking API: block / unblock users and list who the caller blocked."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from src.api.deps import get_moderation
from src.auth import Caller, require_user
from src.services.moderation import ModerationService

router = APIRouter(prefix="/api/v1", tags=["blocks"])


@router.post("/users/{user_id}/block")
async def block_user(
    user_id: str,
    caller: Caller = Depends(require_user),
    moderation: ModerationService = Depends(get_moderation),
):
    """Block a user. Idempotent: re-blocking refreshes the block time."""
    result = await moderation.block(caller.user_id, user_id)
    return {"blocked": True, "message": result.message}


@router.delete("/users/{user_id}/block")
async def unblock_user(
    user_id: str,
    caller: Caller = Depends(require_user),
    moderation: ModerationService = Depends(get_moderation),
):
    """Unblock a user. Succeeds even if they weren't blocked."""
    result = await moderation.unblock(caller.user_id, user_id)
    return {"blocked": False, "message": result.message}


@router.get("/users/{user_id}/blocked")
async def is_blocked(
    user_id: str,
    caller: Caller = Depends(require_user),
    moderation: ModerationService = Depends(get_moderation),
):
    return {"user_id": user_id, "blocked": await moderation.is_blocked(caller.user_id, user_id)}


@router.get("/me/blocked")
async def my_blocked_users(
    caller: Caller = Depends(require_user),
    moderation: ModerationService = Depends(get_moderation),
):
    """Everyone the caller has blocked, most recent first."""
    users = await moderation.blocked_users(caller.user_id)
    return {
        "blocked_users": [u.model_dump() for u in users],
        "count": len(users),
    }
