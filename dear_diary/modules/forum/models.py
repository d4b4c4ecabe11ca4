"""Forum SQLAlchemy models.

Likes are stored one row per (target, username) under a unique constraint; the
`likes` counter on posts and replies is only ever incremented in the same
transaction that inserts the like row.
"""

from __future__ import annotations

from typing import List

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql.sqltypes import TIMESTAMP

from dear_diary.core.db_defaults import timestamp_default
from dear_diary.models.base import Base


class Post(Base):
    """Top-level forum post."""

    __tablename__ = "forum_posts"

    id = Column(Integer, primary_key=True, index=True)
    author = Column(
        String,
        ForeignKey("users.username", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
        index=True,
    )
    content = Column(Text, nullable=False)
    # Client-supplied display timestamp; created_at is authoritative.
    timestamp = Column(String, nullable=True)
    created_at = Column(
        TIMESTAMP(timezone=True), nullable=False, server_default=timestamp_default()
    )
    likes = Column(Integer, nullable=False, default=0, server_default="0")
    is_moderated = Column(Boolean, nullable=False, default=False, server_default="0")
    moderation_reason = Column(String, nullable=True)

    replies = relationship(
        "Reply",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="Reply.id",
    )
    like_rows = relationship(
        "PostLike",
        cascade="all, delete-orphan",
        order_by="PostLike.id",
    )

    @property
    def liked_by(self) -> List[str]:
        return [like.username for like in self.like_rows]


class Reply(Base):
    """Reply attached to a forum post."""

    __tablename__ = "forum_replies"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(
        Integer,
        ForeignKey("forum_posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author = Column(
        String,
        ForeignKey("users.username", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
        index=True,
    )
    content = Column(Text, nullable=False)
    timestamp = Column(String, nullable=True)
    created_at = Column(
        TIMESTAMP(timezone=True), nullable=False, server_default=timestamp_default()
    )
    likes = Column(Integer, nullable=False, default=0, server_default="0")
    is_moderated = Column(Boolean, nullable=False, default=False, server_default="0")
    moderation_reason = Column(String, nullable=True)

    post = relationship("Post", back_populates="replies")
    like_rows = relationship(
        "ReplyLike",
        cascade="all, delete-orphan",
        order_by="ReplyLike.id",
    )

    @property
    def liked_by(self) -> List[str]:
        return [like.username for like in self.like_rows]


class PostLike(Base):
    __tablename__ = "forum_post_likes"

    id = Column(Integer, primary_key=True)
    post_id = Column(
        Integer, ForeignKey("forum_posts.id", ondelete="CASCADE"), nullable=False
    )
    username = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=timestamp_default())

    __table_args__ = (
        UniqueConstraint("post_id", "username", name="uq_forum_post_likes_user"),
    )


class ReplyLike(Base):
    __tablename__ = "forum_reply_likes"

    id = Column(Integer, primary_key=True)
    reply_id = Column(
        Integer, ForeignKey("forum_replies.id", ondelete="CASCADE"), nullable=False
    )
    username = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=timestamp_default())

    __table_args__ = (
        UniqueConstraint("reply_id", "username", name="uq_forum_reply_likes_user"),
    )


__all__ = ["Post", "Reply", "PostLike", "ReplyLike"]
