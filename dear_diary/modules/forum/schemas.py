"""Pydantic schemas for forum posts, replies and likes."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from dear_diary.modules.users.schemas import CamelModel
from dear_diary.modules.utils.common import as_utc

MAX_CONTENT_LENGTH = 10_000


class ContentIn(BaseModel):
    # Blank content is rejected by ForumStore, after the ban check.
    content: str = Field(max_length=MAX_CONTENT_LENGTH)
    timestamp: Optional[str] = None

    @field_validator("content")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()


class PostCreate(ContentIn):
    pass


class ReplyCreate(ContentIn):
    pass


class ReplyOut(CamelModel):
    id: int
    post_id: int
    author: str
    content: str
    timestamp: Optional[str] = None
    created_at: Optional[datetime] = None
    likes: int = 0
    liked_by: List[str] = Field(default_factory=list)
    is_moderated: bool = False
    moderation_reason: Optional[str] = None

    @field_validator("created_at")
    @classmethod
    def _utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


class PostOut(CamelModel):
    id: int
    author: str
    content: str
    timestamp: Optional[str] = None
    created_at: Optional[datetime] = None
    likes: int = 0
    liked_by: List[str] = Field(default_factory=list)
    is_moderated: bool = False
    moderation_reason: Optional[str] = None
    replies: List[ReplyOut] = Field(default_factory=list)

    @field_validator("created_at")
    @classmethod
    def _utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


class DeleteResult(CamelModel):
    ok: bool = True
    post_id: int


__all__ = [
    "DeleteResult",
    "PostCreate",
    "PostOut",
    "ReplyCreate",
    "ReplyOut",
]
