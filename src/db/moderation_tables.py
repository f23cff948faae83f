"""Moderation tables: reports and per-user block relations."""
from __future__ import annotations

from sqlalchemy import BigInteger, Column, Index, String, Text

from src.db.tables import Base, new_id, now_ms


class ReportRow(Base):
    """Append-only report log. Rows are never deleted here; only status changes."""
    __tablename__ = "reports"

    id = Column(String(36), primary_key=True, default=new_id)
    target_type = Column(String(16), nullable=False)  # post, comment, user, block
    target_id = Column(String(128), nullable=False)
    post_id = Column(String(128), nullable=True)  # set for post and comment reports
    reported_by = Column(String(128), nullable=False, index=True)
    reason = Column(Text, nullable=False, default="")
    status = Column(String(16), nullable=False, default="pending")  # pending, reviewed, dismissed
    created_at = Column(BigInteger, nullable=False, default=now_ms)

    __table_args__ = (
        Index("ix_report_status_time", "status", "created_at"),
        Index("ix_report_target", "target_type", "target_id"),
    )


class BlockRow(Base):
    """Directed block: ``blocker_id`` does not want to see ``blocked_id``'s content."""
    __tablename__ = "blocked_users"

    blocker_id = Column(String(128), primary_key=True)
    blocked_id = Column(String(128), primary_key=True)
    created_at = Column(BigInteger, nullable=False, default=now_ms)
