"""Shared helpers for building users and auth headers in tests."""

from typing import Any, Optional

from dear_diary.modules.users import User, UserRole
from dear_diary.modules.utils import security
from dear_diary.oauth2 import create_access_token

PASSWORD = "password123"
_PASSWORD_HASH = security.hash(PASSWORD)


class AttrDict(dict):
    """Dict with attribute-style access for fixtures."""

    def __getattr__(self, item: str) -> Any:
        try:
            return self[item]
        except KeyError as exc:
            raise AttributeError(item) from exc


def create_user(
    session,
    username: str,
    *,
    role: UserRole = UserRole.USER,
    forum_warnings: int = 0,
    is_banned: bool = False,
    ban_expiry=None,
    email: Optional[str] = None,
) -> AttrDict:
    user = User(
        email=email or f"{username}@example.com",
        username=username,
        hashed_password=_PASSWORD_HASH,
        role=role,
        forum_warnings=forum_warnings,
        is_banned=is_banned,
        ban_expiry=ban_expiry,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return AttrDict(
        id=user.id,
        email=user.email,
        username=user.username,
        password=PASSWORD,
        role=user.role,
    )


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'user_id': user['id']})}"}


def fetch_user(session, username: str) -> User:
    """Read the current row, bypassing anything cached in the session."""
    session.expire_all()
    return session.query(User).filter(User.username == username).one()
