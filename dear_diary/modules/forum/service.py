"""Forum posts, replies and likes.

Writes are gated by BanState and the content filter: a blocked author is refused,
flagged content is turned into a sanction and never stored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from dear_diary.content_filter import ContentFilter, default_filter
from dear_diary.core.exceptions import (
    OwnershipRequiredException,
    ResourceNotFoundException,
    ValidationException,
)
from dear_diary.modules.moderation.ban_state import BanState
from dear_diary.modules.moderation.ledger import SanctionLedger, SanctionOutcome
from dear_diary.modules.users.models import User

from .models import Post, PostLike, Reply, ReplyLike

logger = logging.getLogger(__name__)


@dataclass
class Submission:
    """Either the stored post or the sanction applied instead of storing it."""

    post: Optional[Post] = None
    sanction: Optional[SanctionOutcome] = None

    @property
    def moderated(self) -> bool:
        return self.sanction is not None


class ForumStore:
    def __init__(
        self,
        db: Session,
        *,
        content_filter: ContentFilter = default_filter,
        ban_state: Optional[BanState] = None,
        ledger: Optional[SanctionLedger] = None,
    ):
        self.db = db
        self.content_filter = content_filter
        self.ban_state = ban_state or BanState(db)
        self.ledger = ledger or SanctionLedger(db)

    # ---- reads ----

    def list_posts(self) -> List[Post]:
        """All posts, newest first, with replies and likes loaded."""
        return (
            self.db.query(Post)
            .options(
                selectinload(Post.like_rows),
                selectinload(Post.replies).selectinload(Reply.like_rows),
            )
            .order_by(Post.created_at.desc(), Post.id.desc())
            .all()
        )

    def get_post(self, post_id: int) -> Post:
        post = self.db.query(Post).filter(Post.id == post_id).first()
        if not post:
            raise ResourceNotFoundException("Post", post_id)
        return post

    def _get_reply(self, post_id: int, reply_id: int) -> Reply:
        reply = (
            self.db.query(Reply)
            .filter(Reply.id == reply_id, Reply.post_id == post_id)
            .first()
        )
        if not reply:
            raise ResourceNotFoundException("Reply", reply_id)
        return reply

    # ---- writes ----

    def _screen(self, author: User, content: str) -> Optional[SanctionOutcome]:
        """Reject blank content, then scan it. Callers run the ban gate first."""
        if not content or not content.strip():
            raise ValidationException("Content must not be empty", field="content")
        verdict = self.content_filter.scan(content)
        if not verdict.flagged:
            return None
        return self.ledger.record_violation(author.username, verdict.matched_terms)

    def submit_post(
        self, author: User, content: str, timestamp: Optional[str] = None
    ) -> Submission:
        self.ban_state.ensure_can_post(author)
        sanction = self._screen(author, content)
        if sanction:
            return Submission(sanction=sanction)

        post = Post(author=author.username, content=content.strip(), timestamp=timestamp)
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        logger.info("Post %s created by %s", post.id, post.author)
        return Submission(post=post)

    def submit_reply(
        self,
        post_id: int,
        author: User,
        content: str,
        timestamp: Optional[str] = None,
    ) -> Submission:
        self.ban_state.ensure_can_post(author)
        post = self.get_post(post_id)
        sanction = self._screen(author, content)
        if sanction:
            return Submission(sanction=sanction)

        reply = Reply(
            post_id=post.id,
            author=author.username,
            content=content.strip(),
            timestamp=timestamp,
        )
        self.db.add(reply)
        self.db.commit()
        logger.info("Reply %s added to post %s by %s", reply.id, post_id, reply.author)
        return Submission(post=self.get_post(post_id))

    def like(self, post_id: int, username: str) -> Post:
        """Like a post once per user; repeated likes leave it unchanged."""
        post = self.get_post(post_id)
        self._like(
            PostLike(post_id=post.id, username=username),
            already=username in post.liked_by,
            bump=update(Post).where(Post.id == post.id).values(likes=Post.likes + 1),
        )
        return self.get_post(post_id)

    def like_reply(self, post_id: int, reply_id: int, username: str) -> Reply:
        reply = self._get_reply(post_id, reply_id)
        self._like(
            ReplyLike(reply_id=reply.id, username=username),
            already=username in reply.liked_by,
            bump=update(Reply).where(Reply.id == reply.id).values(likes=Reply.likes + 1),
        )
        return self._get_reply(post_id, reply_id)

    def _like(self, like_row, *, already: bool, bump) -> None:
        if already:
            return
        self.db.add(like_row)
        try:
            self.db.flush()
        except IntegrityError:
            # lost the race against an identical like
            self.db.rollback()
            return
        self.db.execute(bump.execution_options(synchronize_session=False))
        self.db.commit()

    def delete(self, post_id: int, requester: User) -> None:
        post = self.get_post(post_id)
        if post.author != requester.username and not requester.is_admin:
            raise OwnershipRequiredException("post")
        self.db.delete(post)
        self.db.commit()
        logger.info("Post %s deleted by %s", post_id, requester.username)


__all__ = ["ForumStore", "Submission"]
