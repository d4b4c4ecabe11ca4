"""SQLAlchemy models and enums for the users domain.

The forum sanction ledger lives on the user row itself (`forum_warnings`,
`is_banned`, `ban_expiry`); every write to those three columns goes through a single
SQL statement in `dear_diary.modules.moderation`.
"""

from __future__ import annotations

import enum

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.sql.sqltypes import TIMESTAMP

from dear_diary.core.db_defaults import timestamp_default
from dear_diary.models.base import Base


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"


class User(Base):
    """Application user model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    username = Column(String, nullable=False, unique=True, index=True)
    hashed_password = Column(String, nullable=False)
    role = Column(
        SQLAlchemyEnum(UserRole, name="user_role_enum"),
        nullable=False,
        default=UserRole.USER,
    )
    forum_warnings = Column(Integer, nullable=False, default=0, server_default="0")
    is_banned = Column(Boolean, nullable=False, default=False, server_default="0")
    ban_expiry = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        TIMESTAMP(timezone=True), nullable=False, server_default=timestamp_default()
    )

    __table_args__ = (
        CheckConstraint("forum_warnings >= 0", name="ck_users_forum_warnings"),
        CheckConstraint(
            "is_banned OR ban_expiry IS NULL", name="ck_users_ban_expiry_requires_ban"
        ),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


__all__ = ["UserRole", "User"]
