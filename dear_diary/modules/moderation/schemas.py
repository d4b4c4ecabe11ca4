"""Pydantic schemas for moderation endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, field_validator

from dear_diary.modules.users.schemas import CamelModel
from dear_diary.modules.utils.common import as_utc

from .ledger import SanctionAction


class SanctionOutcomeOut(CamelModel):
    """Returned instead of the created post or reply when content was flagged."""

    moderated: Literal[True] = True
    username: str
    warnings: int
    is_banned: bool
    ban_expiry: Optional[datetime] = None
    action: SanctionAction
    matched_terms: List[str] = Field(default_factory=list)
    message: str
    reason: str = ""

    @field_validator("ban_expiry")
    @classmethod
    def _utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


class UsernameRequest(CamelModel):
    username: str = Field(min_length=1)


class WarnRequest(UsernameRequest):
    matched_terms: List[str] = Field(default_factory=list)


class BanRequest(UsernameRequest):
    until: Optional[datetime] = None


class AuditLogOut(CamelModel):
    id: int
    admin_username: str
    action: str
    target_username: str
    details: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    @field_validator("created_at")
    @classmethod
    def _utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    @field_validator("details", mode="before")
    @classmethod
    def _details(cls, value: Any) -> Dict[str, Any]:
        return value or {}


__all__ = [
    "AuditLogOut",
    "BanRequest",
    "SanctionOutcomeOut",
    "UsernameRequest",
    "WarnRequest",
]
