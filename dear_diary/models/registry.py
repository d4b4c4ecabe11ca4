"""Import every ORM model so `Base.metadata` is complete (create_all, Alembic)."""

from dear_diary.models.base import Base
from dear_diary.modules.forum.models import Post, PostLike, Reply, ReplyLike
from dear_diary.modules.moderation.models import AuditLog
from dear_diary.modules.users.models import User, UserRole

__all__ = [
    "AuditLog",
    "Base",
    "Post",
    "PostLike",
    "Reply",
    "ReplyLike",
    "User",
    "UserRole",
]
