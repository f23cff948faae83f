"""SQLAlchemy ORM models for the content store tables.

Users, posts and comments are owned by the app's content store; the
moderation service reads author ids from them and patches ``report_count``
on posts. Timestamps are milliseconds since epoch, matching the app.
"""
from __future__ import annotations

import time
import uuid

from sqlalchemy import BigInteger, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase


def now_ms() -> int:
    """Current UTC time in milliseconds since epoch."""
    return int(time.time() * 1000)


def new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass


class UserRow(Base):
    """Public profile as mirrored from the authentication provider."""
    __tablename__ = "users"

    id = Column(String(128), primary_key=True, default=new_id)
    name = Column(String(100), nullable=True)
    email = Column(String(320), nullable=True)
    created_at = Column(BigInteger, nullable=False, default=now_ms)


class PostRow(Base):
    __tablename__ = "posts"

    id = Column(String(128), primary_key=True, default=new_id)
    user_id = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_name = Column(String(100), nullable=True)  # denormalized author name
    text = Column(Text, nullable=False, default="")
    like_count = Column(Integer, nullable=False, default=0)
    comment_count = Column(Integer, nullable=False, default=0)
    report_count = Column(Integer, nullable=False, default=0)
    created_at = Column(BigInteger, nullable=False, default=now_ms, index=True)


class CommentRow(Base):
    __tablename__ = "comments"

    id = Column(String(128), primary_key=True, default=new_id)
    post_id = Column(String(128), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_name = Column(String(100), nullable=True)
    text = Column(Text, nullable=False, default="")
    created_at = Column(BigInteger, nullable=False, default=now_ms)

    __table_args__ = (
        Index("ix_comments_post_time", "post_id", "created_at"),
    )
