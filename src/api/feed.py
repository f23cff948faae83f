"""Feed API: posts and comments as a given viewer may see them."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.api.deps import get_moderation
from src.auth import Caller, get_current_user
from src.db.engine import get_session
from src.db.tables import CommentRow, PostRow
from src.services.moderation import ModerationService

router = APIRouter(prefix="/api/v1", tags=["feed"])


def _post_record(row: PostRow) -> dict:
    return {
        "postId": row.id,
        "userId": row.user_id,
        "userName": row.user_name or "",
        "text": row.text,
        "timestamp": row.created_at,
        "likeCount": row.like_count or 0,
        "commentCount": row.comment_count or 0,
        "reportCount": row.report_count or 0,
    }


def _comment_record(row: CommentRow) -> dict:
    return {
        "commentId": row.id,
        "postId": row.post_id,
        "userId": row.user_id,
        "userName": row.user_name or "",
        "text": row.text,
        "timestamp": row.created_at,
    }


@router.get("/feed")
async def feed(
    offset: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1, le=200),
    caller: Optional[Caller] = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    moderation: ModerationService = Depends(get_moderation),
):
    """Newest posts first, without content from users the viewer blocked.

    Filtering happens after paging, so a page may hold fewer than ``limit`` posts.
    """
    result = await session.execute(
        select(PostRow)
        .order_by(PostRow.created_at.desc(), PostRow.id)
        .offset(offset)
        .limit(limit or settings.FEED_PAGE_SIZE)
    )
    posts = [_post_record(r) for r in result.scalars().all()]
    visible = await moderation.filter_visible(posts, caller.user_id if caller else None)
    return {"posts": visible, "count": len(visible)}


@router.get("/posts/{post_id}/comments")
async def post_comments(
    post_id: str,
    caller: Optional[Caller] = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    moderation: ModerationService = Depends(get_moderation),
):
    """Comments on a post, oldest first, minus blocked authors."""
    if await session.get(PostRow, post_id) is None:
        raise HTTPException(404, "Post not found")
    result = await session.execute(
        select(CommentRow)
        .where(CommentRow.post_id == post_id)
        .order_by(CommentRow.created_at.asc(), CommentRow.id)
    )
    comments = [_comment_record(r) for r in result.scalars().all()]
    visible = await moderation.filter_visible(comments, caller.user_id if caller else None)
    return {"comments": visible, "count": len(visible)}
