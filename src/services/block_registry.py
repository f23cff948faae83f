"""Block registry: per-user sets of blocked users.

Relations are keyed by (blocker, blocked): blocking twice refreshes the
timestamp, unblocking deletes the row outright.
"""
from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.moderation_tables import BlockRow
from src.db.tables import UserRow, now_ms
from src.models.moderation import BlockedUser, BlockRelation, TargetType
from src.services.errors import ValidationError
from src.services.report_store import new_report_row
from src.services.storage import SessionStore

logger = logging.getLogger(__name__)

UNKNOWN_USER = "Unknown User"
BLOCK_AUDIT_REASON = "User blocked"


def _require(value: str, what: str, action: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{what} is required", action=action)
    return value


def _upsert_block(session: AsyncSession, blocker_id: str, blocked_id: str, created_at: int):
    """INSERT .. ON CONFLICT DO UPDATE, so concurrent re-blocks just refresh the timestamp."""
    insert = pg_insert if session.get_bind().dialect.name == "postgresql" else sqlite_insert
    stmt = insert(BlockRow).values(blocker_id=blocker_id, blocked_id=blocked_id, created_at=created_at)
    return stmt.on_conflict_do_update(
        index_elements=[BlockRow.blocker_id, BlockRow.blocked_id],
        set_={"created_at": stmt.excluded.created_at},
    )


class BlockRegistry(SessionStore):

    async def block(self, blocker_id: str, blocked_id: str) -> BlockRelation:
        """Block a user and leave a ``block`` entry in the report log for moderators."""
        action = "block user"
        blocker_id = _require(blocker_id, "blocking user id", action)
        blocked_id = _require(blocked_id, "blocked user id", action)
        if blocker_id == blocked_id:
            raise ValidationError("cannot block yourself", action=action)

        async def work(session: AsyncSession) -> BlockRelation:
            created_at = now_ms()
            await session.execute(_upsert_block(session, blocker_id, blocked_id, created_at))
            session.add(new_report_row(TargetType.BLOCK, blocked_id, blocker_id, BLOCK_AUDIT_REASON))
            return BlockRelation(blocker_id=blocker_id, blocked_id=blocked_id, created_at=created_at)

        relation = await self._run(action, work)
        logger.info("User %s blocked %s", blocker_id, blocked_id)
        return relation

    async def unblock(self, blocker_id: str, blocked_id: str) -> None:
        action = "unblock user"
        blocker_id = _require(blocker_id, "blocking user id", action)
        blocked_id = _require(blocked_id, "blocked user id", action)

        async def work(session: AsyncSession) -> int:
            result = await session.execute(
                delete(BlockRow).where(
                    BlockRow.blocker_id == blocker_id,
                    BlockRow.blocked_id == blocked_id,
                )
            )
            return result.rowcount

        removed = await self._run(action, work)
        if removed:
            logger.info("User %s unblocked %s", blocker_id, blocked_id)
        else:
            logger.debug("Unblock of %s by %s was a no-op", blocked_id, blocker_id)

    async def is_blocked(self, blocker_id: str, candidate_id: str) -> bool:
        action = "check block"
        blocker_id = _require(blocker_id, "blocking user id", action)
        candidate_id = _require(candidate_id, "candidate user id", action)

        async def work(session: AsyncSession) -> bool:
            return await session.get(BlockRow, (blocker_id, candidate_id)) is not None

        return await self._run(action, work)

    async def list_blocked(self, blocker_id: str) -> set[str]:
        action = "load blocked users"
        blocker_id = _require(blocker_id, "blocking user id", action)

        async def work(session: AsyncSession) -> set[str]:
            result = await session.execute(
                select(BlockRow.blocked_id).where(BlockRow.blocker_id == blocker_id)
            )
            return set(result.scalars().all())

        return await self._run(action, work)

    async def blocked_users(self, blocker_id: str) -> list[BlockedUser]:
        """Blocked users with display names, most recently blocked first."""
        action = "load blocked users"
        blocker_id = _require(blocker_id, "blocking user id", action)

        async def work(session: AsyncSession) -> list[BlockedUser]:
            result = await session.execute(
                select(BlockRow.blocked_id, BlockRow.created_at, UserRow.name)
                .outerjoin(UserRow, UserRow.id == BlockRow.blocked_id)
                .where(BlockRow.blocker_id == blocker_id)
                .order_by(BlockRow.created_at.desc(), BlockRow.blocked_id)
            )
            return [
                BlockedUser(user_id=blocked_id, display_name=name or UNKNOWN_USER, blocked_at=created_at)
                for blocked_id, created_at, name in result.all()
            ]

        return await self._run(action, work)
