"""Content Reporting API: community safety for posts, comments and users.

Users can report:
- Posts (spam, harassment, false information, ...)
- Comments on a post
- Other users

Admin endpoints expose the moderation queue to the moderator workflow.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from src.api.deps import get_moderation
from src.auth import Caller, require_admin, require_user
from src.models.moderation import REPORT_CATEGORIES, compose_reason
from src.services.moderation import ModerationService

router = APIRouter(prefix="/api/v1", tags=["reports"])


class ReportRequest(BaseModel):
    category: str | None = Field(None, max_length=100, description="One of /report-reasons")
    details: str | None = Field(None, max_length=2000)
    reason: str | None = Field(None, max_length=2200, description="Pre-composed reason; overrides category")

    def resolved_reason(self) -> str:
        if self.reason and self.reason.strip():
            return self.reason.strip()
        if self.category and self.category.strip():
            return compose_reason(self.category, self.details)
        raise HTTPException(status_code=400, detail="A report reason is required")


class ReportStatusUpdate(BaseModel):
    status: str = Field(..., pattern="^(reviewed|dismissed)$")


@router.get("/report-reasons")
async def report_reasons():
    """Categories offered by the report form."""
    return {"reasons": REPORT_CATEGORIES}


@router.post("/posts/{post_id}/report", status_code=201)
async def report_post(
    post_id: str,
    body: ReportRequest,
    caller: Caller = Depends(require_user),
    moderation: ModerationService = Depends(get_moderation),
):
    """Report a post for objectionable content."""
    result = await moderation.report_post(post_id, caller.user_id, body.resolved_reason())
    return {"id": result.report_id, "status": "pending", "message": result.message}


@router.post("/posts/{post_id}/comments/{comment_id}/report", status_code=201)
async def report_comment(
    post_id: str,
    comment_id: str,
    body: ReportRequest,
    caller: Caller = Depends(require_user),
    moderation: ModerationService = Depends(get_moderation),
):
    """Report a comment for objectionable content."""
    result = await moderation.report_comment(post_id, comment_id, caller.user_id, body.resolved_reason())
    return {"id": result.report_id, "status": "pending", "message": result.message}


@router.post("/users/{user_id}/report", status_code=201)
async def report_user(
    user_id: str,
    body: ReportRequest,
    caller: Caller = Depends(require_user),
    moderation: ModerationService = Depends(get_moderation),
):
    """Report a user for abusive behavior."""
    result = await moderation.report_user(user_id, caller.user_id, body.resolved_reason())
    return {"id": result.report_id, "status": "pending", "message": result.message}


# ── Admin Endpoints ──────────────────────────────────────────────────────

@router.get("/admin/reports", dependencies=[Depends(require_admin)])
async def list_reports(
    status: str = Query("pending", pattern="^(pending|reviewed|dismissed|all)$"),
    target_type: str | None = Query(None, pattern="^(post|comment|user|block)$"),
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    moderation: ModerationService = Depends(get_moderation),
):
    """Moderation queue, newest first."""
    reports = await moderation.list_reports(
        status=None if status == "all" else status,
        target_type=target_type,
        offset=offset,
        limit=limit,
    )
    return {"reports": [r.to_record() for r in reports], "count": len(reports)}


@router.patch("/admin/reports/{report_id}", dependencies=[Depends(require_admin)])
async def update_report(
    report_id: str,
    body: ReportStatusUpdate,
    moderation: ModerationService = Depends(get_moderation),
):
    """Record a moderator decision on a pending report."""
    report = await moderation.review_report(report_id, body.status)
    return {"id": report.id, "status": report.status.value, "message": "Report updated"}
