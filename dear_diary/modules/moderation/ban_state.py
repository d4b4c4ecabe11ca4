"""Ban evaluation and manual ban/unban.

Temporary bans are lifted lazily: the first read after `ban_expiry` clears the
columns with a conditional UPDATE, so a concurrent re-ban is never overwritten.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from dear_diary.core.config import settings
from dear_diary.core.exceptions import (
    ResourceNotFoundException,
    UserBannedException,
    ValidationException,
)
from dear_diary.modules.users.models import User
from dear_diary.modules.utils.common import as_utc, utc_now

logger = logging.getLogger(__name__)


class BanState:
    """Answers "may this user write to the forum right now?"."""

    def __init__(self, db: Session, *, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock

    @staticmethod
    def _active(user: User, now: datetime) -> bool:
        if not user.is_banned:
            return False
        expiry = as_utc(user.ban_expiry)
        return expiry is None or now <= expiry

    def is_blocked(self, user: User) -> bool:
        """Return True while a ban is in force; clears an expired temporary ban."""
        now = self.clock()
        if not user.is_banned:
            return False
        if self._active(user, now):
            return True

        result = self.db.execute(
            update(User)
            .where(
                User.id == user.id,
                User.is_banned.is_(True),
                User.ban_expiry.isnot(None),
                User.ban_expiry < now,
            )
            .values(is_banned=False, ban_expiry=None)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        if result.rowcount:
            logger.info(
                "Temporary ban expired for %s",
                user.username,
                extra={"username": user.username},
            )
        # commit expired `user`; attribute access reloads the current row
        return self._active(user, now)

    def ensure_can_post(self, user: User) -> None:
        if self.is_blocked(user):
            raise UserBannedException(
                ban_expiry=as_utc(user.ban_expiry),
                appeal_url=settings.appeal_url,
            )

    def manual_ban(
        self, username: str, until: Optional[datetime] = None, *, commit: bool = True
    ) -> None:
        """Ban `username` until `until`, or permanently when omitted."""
        until = as_utc(until)
        if until is not None and until <= self.clock():
            raise ValidationException("Ban expiry must be in the future", field="until")
        self._write(username, is_banned=True, ban_expiry=until, commit=commit)
        logger.info(
            "Banned %s until %s",
            username,
            until.isoformat() if until else "further notice",
            extra={"username": username, "action": "ban"},
        )

    def manual_unban(self, username: str, *, commit: bool = True) -> None:
        """Lift any ban. The warning count is left as is."""
        self._write(username, is_banned=False, ban_expiry=None, commit=commit)
        logger.info("Unbanned %s", username, extra={"username": username, "action": "unban"})

    def _write(self, username: str, *, commit: bool, **values) -> None:
        result = self.db.execute(
            update(User)
            .where(User.username == username)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise ResourceNotFoundException("User", username)
        if commit:
            self.db.commit()


__all__ = ["BanState"]
