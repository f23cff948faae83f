"""Report store: append-only log of reports against posts, comments and users."""
from __future__ import annotations

import logging
from typing import Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.moderation_tables import ReportRow
from src.db.tables import CommentRow, PostRow, UserRow, new_id, now_ms
from src.models.moderation import Report, ReportStatus, TargetType
from src.services.errors import InvalidTransitionError, NotFoundError, ValidationError
from src.services.storage import SessionStore

logger = logging.getLogger(__name__)

SUBMIT = "submit report"

# Which ids each report type needs, and which one is the report's target_id
_TARGET_KEYS: dict[TargetType, tuple[str, ...]] = {
    TargetType.POST: ("post_id",),
    TargetType.COMMENT: ("post_id", "comment_id"),
    TargetType.USER: ("user_id",),
    TargetType.BLOCK: ("blocked_user_id",),
}

_REVIEW_STATES = {ReportStatus.REVIEWED, ReportStatus.DISMISSED}


def _row_to_report(row: ReportRow) -> Report:
    return Report(
        id=row.id,
        target_type=TargetType(row.target_type),
        target_id=row.target_id,
        post_id=row.post_id,
        reported_by=row.reported_by,
        reason=row.reason or "",
        created_at=row.created_at,
        status=ReportStatus(row.status),
    )


def new_report_row(
    target_type: TargetType,
    target_id: str,
    reported_by: str,
    reason: str,
    post_id: Optional[str] = None,
) -> ReportRow:
    """Build a pending report row with a fresh id and timestamp."""
    return ReportRow(
        id=new_id(),
        target_type=target_type.value,
        target_id=target_id,
        post_id=post_id,
        reported_by=reported_by,
        reason=reason,
        status=ReportStatus.PENDING.value,
        created_at=now_ms(),
    )


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


class ReportStore(SessionStore):

    async def submit_report(
        self,
        target_type: TargetType | str,
        target_ids: Mapping[str, str],
        reported_by: str,
        reason: str,
    ) -> str:
        """Write a pending report and return its id.

        Post reports also bump ``posts.report_count`` in the same transaction,
        so a failed report never leaves the counter incremented.
        """
        try:
            target_type = TargetType(target_type)
        except ValueError:
            raise ValidationError(f"unknown report target type {target_type!r}", action=SUBMIT)

        reported_by = _clean(reported_by)
        if not reported_by:
            raise ValidationError("reporting user id is required", action=SUBMIT)

        ids = {}
        for key in _TARGET_KEYS[target_type]:
            ids[key] = _clean(target_ids.get(key))
            if not ids[key]:
                raise ValidationError(f"{key} is required for a {target_type.value} report", action=SUBMIT)

        target_id = ids[_TARGET_KEYS[target_type][-1]]
        row = new_report_row(target_type, target_id, reported_by, reason or "", post_id=ids.get("post_id"))

        async def work(session: AsyncSession) -> str:
            await self._ensure_target_exists(session, target_type, ids)
            session.add(row)
            if target_type is TargetType.POST:
                await session.execute(
                    update(PostRow)
                    .where(PostRow.id == target_id)
                    .values(report_count=PostRow.report_count + 1)
                )
            return row.id

        report_id = await self._run(SUBMIT, work)
        logger.info(
            "Report %s filed: type=%s target=%s by=%s",
            report_id, target_type.value, target_id, reported_by,
        )
        return report_id

    async def _ensure_target_exists(
        self, session: AsyncSession, target_type: TargetType, ids: dict[str, str],
    ) -> None:
        if target_type is TargetType.POST:
            if await session.get(PostRow, ids["post_id"]) is None:
                raise NotFoundError(f"post {ids['post_id']} not found", action=SUBMIT)
        elif target_type is TargetType.COMMENT:
            comment = await session.get(CommentRow, ids["comment_id"])
            if comment is None or comment.post_id != ids["post_id"]:
                raise NotFoundError(
                    f"comment {ids['comment_id']} not found on post {ids['post_id']}", action=SUBMIT,
                )
        elif target_type is TargetType.USER:
            if await session.get(UserRow, ids["user_id"]) is None:
                raise NotFoundError(f"user {ids['user_id']} not found", action=SUBMIT)
        # block audit entries reference the blocked user id as given

    async def get_report(self, report_id: str) -> Report:
        async def work(session: AsyncSession) -> Report:
            row = await session.get(ReportRow, report_id)
            if row is None:
                raise NotFoundError(f"report {report_id} not found")
            return _row_to_report(row)

        return await self._run("load report", work)

    async def list_reports(
        self,
        status: Optional[ReportStatus | str] = None,
        target_type: Optional[TargetType | str] = None,
        reported_by: Optional[str] = None,
        offset: int = 0,
        limit: int = 50,
    ) -> list[Report]:
        """Reports newest first, optionally narrowed by status/type/reporter."""
        query = select(ReportRow)
        try:
            if status is not None:
                query = query.where(ReportRow.status == ReportStatus(status).value)
            if target_type is not None:
                query = query.where(ReportRow.target_type == TargetType(target_type).value)
        except ValueError as exc:
            raise ValidationError(str(exc), action="list reports")
        if reported_by:
            query = query.where(ReportRow.reported_by == reported_by)
        query = query.order_by(ReportRow.created_at.desc(), ReportRow.id).offset(offset).limit(limit)

        async def work(session: AsyncSession) -> list[Report]:
            result = await session.execute(query)
            return [_row_to_report(r) for r in result.scalars().all()]

        return await self._run("list reports", work)

    async def set_status(self, report_id: str, status: ReportStatus | str) -> Report:
        """Apply a moderator decision. Only pending reports can move, and only to reviewed/dismissed."""
        try:
            status = ReportStatus(status)
        except ValueError:
            raise ValidationError(f"unknown report status {status!r}", action="update report")

        async def work(session: AsyncSession) -> Report:
            row = await session.get(ReportRow, report_id)
            if row is None:
                raise NotFoundError(f"report {report_id} not found", action="update report")
            if row.status != ReportStatus.PENDING.value or status not in _REVIEW_STATES:
                raise InvalidTransitionError(
                    f"cannot move report from {row.status} to {status.value}", action="update report",
                )
            row.status = status.value
            return _row_to_report(row)

        report = await self._run("update report", work)
        logger.info("Report %s marked %s", report_id, status.value)
        return report
