"""Shared FastAPI dependencies."""
from __future__ import annotations

from fastapi import Request

from src.services.moderation import ModerationService


def get_moderation(request: Request) -> ModerationService:
    """The ModerationService built at startup (see ``lifespan`` in main)."""
    return request.app.state.moderation
