"""Application services for the users domain."""

from __future__ import annotations

import logging
from typing import List

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from dear_diary.core.exceptions import (
    InvalidCredentialsException,
    ResourceAlreadyExistsException,
    ResourceNotFoundException,
)
from dear_diary.modules.utils import security

from .models import User, UserRole
from .schemas import UserCreate

logger = logging.getLogger(__name__)


class UserService:
    """Encapsulates user-centric lookups and account creation shared across routers."""

    def __init__(self, db: Session):
        self.db = db

    def create_user(self, payload: UserCreate) -> User:
        """Create a new user after validating uniqueness.

        The very first account becomes the forum admin.
        """
        email = payload.email.lower()
        existing = (
            self.db.query(User)
            .filter(
                or_(
                    func.lower(User.email) == email,
                    func.lower(User.username) == payload.username.lower(),
                )
            )
            .first()
        )
        if existing:
            field = "email" if existing.email.lower() == email else "username"
            raise ResourceAlreadyExistsException("User", field)

        is_first = self.db.query(func.count(User.id)).scalar() == 0
        new_user = User(
            email=email,
            username=payload.username,
            hashed_password=security.hash(payload.password),
            role=UserRole.ADMIN if is_first else UserRole.USER,
        )
        self.db.add(new_user)
        self.db.commit()
        self.db.refresh(new_user)
        logger.info(
            "Registered user %s (role=%s)", new_user.username, new_user.role.value
        )
        return new_user

    def authenticate(self, email: str, password: str) -> User:
        user = self.db.query(User).filter(User.email == email.lower()).first()
        if not user or not security.verify(password, user.hashed_password):
            raise InvalidCredentialsException()
        return user

    def get_by_username(self, username: str) -> User:
        user = self.db.query(User).filter(User.username == username).first()
        if not user:
            raise ResourceNotFoundException("User", username)
        return user

    def list_users(self) -> List[User]:
        return self.db.query(User).order_by(User.created_at.asc(), User.id.asc()).all()


__all__ = ["UserService"]
