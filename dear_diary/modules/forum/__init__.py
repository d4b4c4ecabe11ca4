"""Forum posts, replies and likes."""

from .models import Post, PostLike, Reply, ReplyLike
from .service import ForumStore, Submission

__all__ = ["ForumStore", "Post", "PostLike", "Reply", "ReplyLike", "Submission"]
