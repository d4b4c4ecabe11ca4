"""Moderation models.

Sanction state itself lives on `users`; this module only holds the admin audit trail.
"""

from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, Integer, String

from dear_diary.core.db_defaults import timestamp_default
from dear_diary.models.base import Base


class AuditLog(Base):
    """Audit trail for admin moderation actions (ban, unban, warning reset)."""

    __tablename__ = "moderation_audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    admin_username = Column(String, nullable=False, index=True)
    action = Column(String, nullable=False)
    target_username = Column(String, nullable=False, index=True)
    details = Column(JSON, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=timestamp_default())


__all__ = ["AuditLog"]
