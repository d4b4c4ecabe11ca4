"""Centralized API router registration.

Groups:
- Auth: register, login, profile, admin user listing.
- Forum: posts, replies, likes.
- Moderation: violation reporting, bans, warning resets, audit trail.
"""

from fastapi import APIRouter

from dear_diary.routers import auth, forum, moderation

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(forum.router)
api_router.include_router(moderation.router)

__all__ = ["api_router"]
