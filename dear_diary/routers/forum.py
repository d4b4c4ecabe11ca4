"""Forum router: posts, replies, likes and deletion."""

# =====================================================
# ==================== Imports ========================
# =====================================================
from typing import List, Union

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from dear_diary import oauth2
from dear_diary.core.database import get_db
from dear_diary.modules.forum import ForumStore, Submission
from dear_diary.modules.forum.schemas import (
    DeleteResult,
    PostCreate,
    PostOut,
    ReplyCreate,
    ReplyOut,
)
from dear_diary.modules.moderation.schemas import SanctionOutcomeOut
from dear_diary.modules.users import User

# =====================================================
# =============== Global Variables ====================
# =====================================================
router = APIRouter(prefix="/forum", tags=["Forum"])


def get_forum_store(db: Session = Depends(get_db)) -> ForumStore:
    return ForumStore(db)


def _render(submission: Submission, response: Response) -> Union[PostOut, SanctionOutcomeOut]:
    """201 with the post when stored, 200 with the sanction when moderated."""
    if submission.moderated:
        response.status_code = status.HTTP_200_OK
        return SanctionOutcomeOut.model_validate(submission.sanction)
    response.status_code = status.HTTP_201_CREATED
    return PostOut.model_validate(submission.post)


# =====================================================
# ==================== Endpoints ======================
# =====================================================


@router.get("/posts", response_model=List[PostOut])
def list_posts(store: ForumStore = Depends(get_forum_store)):
    """Public listing, newest first."""
    return [PostOut.model_validate(post) for post in store.list_posts()]


@router.get("/posts/{post_id}", response_model=PostOut)
def get_post(post_id: int, store: ForumStore = Depends(get_forum_store)):
    return PostOut.model_validate(store.get_post(post_id))


@router.post(
    "/posts",
    status_code=status.HTTP_201_CREATED,
    response_model=Union[PostOut, SanctionOutcomeOut],
)
def create_post(
    payload: PostCreate,
    response: Response,
    store: ForumStore = Depends(get_forum_store),
    current_user: User = Depends(oauth2.get_current_user),
):
    """
    Create a post.

    Flagged content is not stored; the caller receives the sanction applied instead.
    """
    submission = store.submit_post(current_user, payload.content, payload.timestamp)
    return _render(submission, response)


@router.post(
    "/posts/{post_id}/replies",
    status_code=status.HTTP_201_CREATED,
    response_model=Union[PostOut, SanctionOutcomeOut],
)
def create_reply(
    post_id: int,
    payload: ReplyCreate,
    response: Response,
    store: ForumStore = Depends(get_forum_store),
    current_user: User = Depends(oauth2.get_current_user),
):
    """Reply to a post; returns the whole post with its replies."""
    submission = store.submit_reply(
        post_id, current_user, payload.content, payload.timestamp
    )
    return _render(submission, response)


@router.post("/posts/{post_id}/like", response_model=PostOut)
def like_post(
    post_id: int,
    store: ForumStore = Depends(get_forum_store),
    current_user: User = Depends(oauth2.get_current_user),
):
    return PostOut.model_validate(store.like(post_id, current_user.username))


@router.post("/posts/{post_id}/replies/{reply_id}/like", response_model=ReplyOut)
def like_reply(
    post_id: int,
    reply_id: int,
    store: ForumStore = Depends(get_forum_store),
    current_user: User = Depends(oauth2.get_current_user),
):
    return ReplyOut.model_validate(
        store.like_reply(post_id, reply_id, current_user.username)
    )


@router.delete("/posts/{post_id}", response_model=DeleteResult)
def delete_post(
    post_id: int,
    store: ForumStore = Depends(get_forum_store),
    current_user: User = Depends(oauth2.get_current_user),
):
    """Hard delete; author or admin only."""
    store.delete(post_id, current_user)
    return DeleteResult(post_id=post_id)
