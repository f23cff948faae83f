"""Moderation facade: the one entry point for reporting, blocking and filtering.

Callers pass their own identity on every call; the service holds no session
state. Build one instance at startup around a session factory and share it.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Callable, Optional, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.models.moderation import BlockedUser, ModerationResult, Report, ReportStatus, TargetType
from src.services import visibility
from src.services.block_registry import BlockRegistry
from src.services.report_store import ReportStore
from src.services.storage import DEFAULT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

T = TypeVar("T")

REPORT_SUBMITTED = "Report submitted successfully. We'll review it within 24 hours."
USER_REPORTED = "User reported successfully. We'll review it within 24 hours."
USER_BLOCKED = "User blocked successfully. You won't see their content anymore."
USER_UNBLOCKED = "User unblocked successfully."


class ModerationService:

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.reports = ReportStore(session_factory, timeout=timeout)
        self.blocks = BlockRegistry(session_factory, timeout=timeout)

    # ── Reports ──────────────────────────────────────────────────────────

    async def report_post(self, post_id: str, reported_by: str, reason: str) -> ModerationResult:
        report_id = await self.reports.submit_report(
            TargetType.POST, {"post_id": post_id}, reported_by, reason,
        )
        return ModerationResult(REPORT_SUBMITTED, report_id)

    async def report_comment(
        self, post_id: str, comment_id: str, reported_by: str, reason: str,
    ) -> ModerationResult:
        report_id = await self.reports.submit_report(
            TargetType.COMMENT, {"post_id": post_id, "comment_id": comment_id}, reported_by, reason,
        )
        return ModerationResult(REPORT_SUBMITTED, report_id)

    async def report_user(self, user_id: str, reported_by: str, reason: str) -> ModerationResult:
        report_id = await self.reports.submit_report(
            TargetType.USER, {"user_id": user_id}, reported_by, reason,
        )
        return ModerationResult(USER_REPORTED, report_id)

    async def list_reports(
        self,
        status: Optional[ReportStatus | str] = None,
        target_type: Optional[TargetType | str] = None,
        offset: int = 0,
        limit: int = 50,
    ) -> list[Report]:
        return await self.reports.list_reports(
            status=status, target_type=target_type, offset=offset, limit=limit,
        )

    async def review_report(self, report_id: str, status: ReportStatus | str) -> Report:
        """Hook for the external moderator workflow."""
        return await self.reports.set_status(report_id, status)

    # ── Blocks ───────────────────────────────────────────────────────────

    async def block(self, blocker_id: str, blocked_id: str) -> ModerationResult:
        await self.blocks.block(blocker_id, blocked_id)
        return ModerationResult(USER_BLOCKED)

    async def unblock(self, blocker_id: str, blocked_id: str) -> ModerationResult:
        await self.blocks.unblock(blocker_id, blocked_id)
        return ModerationResult(USER_UNBLOCKED)

    async def is_blocked(self, blocker_id: str, candidate_id: str) -> bool:
        return await self.blocks.is_blocked(blocker_id, candidate_id)

    async def list_blocked(self, blocker_id: str) -> set[str]:
        return await self.blocks.list_blocked(blocker_id)

    async def blocked_users(self, blocker_id: str) -> list[BlockedUser]:
        return await self.blocks.blocked_users(blocker_id)

    # ── Visibility ───────────────────────────────────────────────────────

    async def filter_visible(
        self,
        items: Iterable[T],
        viewer_id: Optional[str],
        author: Callable[[Any], Optional[str]] = visibility.author_of,
    ) -> list[T]:
        """Content the viewer may see, in the original order.

        Anonymous viewers (no id) have no block list, so they get every item
        back unchanged. Signed-in viewers lose items by anyone they blocked.
        """
        items = list(items)
        if not (viewer_id or "").strip():
            logger.debug("Anonymous viewer: %d items returned unfiltered", len(items))
            return items
        blocked = await self.blocks.list_blocked(viewer_id)
        return visibility.filter_visible(items, blocked, author)
