"""Admin moderation workflows: inspect, ban, unban, reset warnings, audit."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from dear_diary.core.exceptions import AdminRequiredException
from dear_diary.modules.users.models import User
from dear_diary.modules.users.service import UserService

from .ban_state import BanState
from .ledger import SanctionLedger
from .models import AuditLog


class ModerationAdmin:
    """Admin-only operations. Every write is audited in the same transaction."""

    def __init__(self, db: Session):
        self.db = db
        self.ban_state = BanState(db)
        self.ledger = SanctionLedger(db)
        self.users = UserService(db)

    @staticmethod
    def _require_admin(admin: User) -> None:
        if not admin.is_admin:
            raise AdminRequiredException()

    def _audit(self, admin: User, action: str, target: str, **details) -> None:
        self.db.add(
            AuditLog(
                admin_username=admin.username,
                action=action,
                target_username=target,
                details=details,
            )
        )

    def list_users(self, admin: User) -> List[User]:
        """All users with expired temporary bans already lifted."""
        self._require_admin(admin)
        users = self.users.list_users()
        for user in users:
            self.ban_state.is_blocked(user)
        return users

    def ban(self, admin: User, username: str, until: Optional[datetime] = None) -> User:
        self._require_admin(admin)
        self.ban_state.manual_ban(username, until, commit=False)
        self._audit(
            admin, "ban", username, until=until.isoformat() if until else None
        )
        self.db.commit()
        return self.users.get_by_username(username)

    def unban(self, admin: User, username: str) -> User:
        self._require_admin(admin)
        self.ban_state.manual_unban(username, commit=False)
        self._audit(admin, "unban", username)
        self.db.commit()
        return self.users.get_by_username(username)

    def reset_warnings(self, admin: User, username: str) -> User:
        self._require_admin(admin)
        previous = self.ledger.reset_warnings(username, commit=False)
        self._audit(admin, "reset_warnings", username, previous_warnings=previous)
        self.db.commit()
        return self.users.get_by_username(username)

    def audit_log(self, admin: User, limit: int = 50) -> List[AuditLog]:
        self._require_admin(admin)
        return (
            self.db.query(AuditLog)
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .limit(limit)
            .all()
        )


__all__ = ["ModerationAdmin"]
