"""Pydantic schemas for the users domain.

Field names are snake_case in Python and camelCase on the wire
(`forumWarnings`, `isBanned`, `banExpiry`).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from dear_diary.modules.utils.common import as_utc

from .models import UserRole


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class UserCreate(BaseModel):
    email: EmailStr
    username: str = Field(min_length=3, max_length=32, pattern=r"^[A-Za-z0-9_.-]+$")
    password: str = Field(min_length=8, max_length=72)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserOut(CamelModel):
    id: int
    email: EmailStr
    username: str
    role: UserRole
    forum_warnings: int = 0
    is_banned: bool = False
    ban_expiry: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @field_validator("ban_expiry", "created_at")
    @classmethod
    def _utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


class Token(CamelModel):
    token: str
    token_type: str = "bearer"
    user: UserOut


__all__ = ["CamelModel", "UserCreate", "UserLogin", "UserOut", "Token"]
