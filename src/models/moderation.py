"""Moderation data models: reports, block relations and their flat records."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class TargetType(str, Enum):
    POST = "post"
    COMMENT = "comment"
    USER = "user"
    BLOCK = "block"


class ReportStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    DISMISSED = "dismissed"


# Categories offered by the app's report form. Reasons stay free text.
REPORT_CATEGORIES = [
    "Harassment or bullying",
    "Hate speech or discrimination",
    "Spam or misleading content",
    "Inappropriate or offensive content",
    "Violence or dangerous content",
    "Sexual content",
    "False information",
    "Other",
]

REASON_SEPARATOR = " - "


def compose_reason(category: str, details: Optional[str] = None) -> str:
    """Join a selected category and optional free-text detail into one reason."""
    category = category.strip()
    details = (details or "").strip()
    return f"{category}{REASON_SEPARATOR}{details}" if details else category


class Report(BaseModel):
    id: str
    target_type: TargetType
    target_id: str
    post_id: Optional[str] = None  # parent post for comment reports
    reported_by: str
    reason: str
    created_at: int  # ms since epoch, UTC
    status: ReportStatus = ReportStatus.PENDING

    def to_record(self) -> dict:
        """Flat key-value record with the field names the app stores."""
        record = {
            "id": self.id,
            "reportId": self.id,
            "targetType": self.target_type.value,
            "type": self.target_type.value,
            "targetId": self.target_id,
            "reportedBy": self.reported_by,
            "reason": self.reason,
            "createdAt": self.created_at,
            "timestamp": self.created_at,
            "status": self.status.value,
        }
        if self.target_type is TargetType.POST:
            record["postId"] = self.target_id
        elif self.target_type is TargetType.COMMENT:
            record["postId"] = self.post_id
            record["commentId"] = self.target_id
        elif self.target_type is TargetType.USER:
            record["userId"] = self.target_id
        else:
            record["blockedUserId"] = self.target_id
            record["blockedBy"] = self.reported_by
        return record


class BlockRelation(BaseModel):
    blocker_id: str
    blocked_id: str
    created_at: int

    def to_record(self) -> dict:
        return {
            "blockerId": self.blocker_id,
            "blockedId": self.blocked_id,
            "blockedBy": self.blocker_id,
            "blockedUserId": self.blocked_id,
            "createdAt": self.created_at,
            "timestamp": self.created_at,
        }


class BlockedUser(BaseModel):
    """A row of the viewer's blocked-users list."""
    user_id: str
    display_name: str
    blocked_at: int


@dataclass
class ModerationResult:
    """Outcome of a successful moderation write, with the message shown to the user."""
    message: str
    report_id: Optional[str] = None
