"""Per-user sanction ledger.

Each violation is recorded with one UPDATE that increments `forum_warnings` and
derives the ban columns from the incremented value:

    1      -> warned           (ban columns untouched)
    2      -> temporary_ban    (is_banned, expiry = now + TEMP_BAN_HOURS, unless a
                                permanent or longer ban is already in force)
    3 or + -> permanent_ban    (is_banned, expiry cleared)

Concurrent violations for the same user serialise on the row lock, so two
requests arriving together always observe consecutive counts.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

from sqlalchemy import and_, case, literal, null, select, true, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dear_diary.content_filter import describe
from dear_diary.core.config import settings
from dear_diary.core.exceptions import ResourceNotFoundException
from dear_diary.modules.users.models import User
from dear_diary.modules.utils.common import as_utc, utc_now

logger = logging.getLogger(__name__)

TEMP_BAN_AT = 2
PERMANENT_BAN_AT = 3


class SanctionAction(str, enum.Enum):
    WARNED = "warned"
    TEMPORARY_BAN = "temporary_ban"
    PERMANENT_BAN = "permanent_ban"


def action_for(warnings: int) -> SanctionAction:
    """Map a post-increment warning count to the sanction it triggers."""
    if warnings >= PERMANENT_BAN_AT:
        return SanctionAction.PERMANENT_BAN
    if warnings == TEMP_BAN_AT:
        return SanctionAction.TEMPORARY_BAN
    return SanctionAction.WARNED


@dataclass
class SanctionOutcome:
    username: str
    warnings: int
    is_banned: bool
    ban_expiry: Optional[datetime]
    action: SanctionAction
    matched_terms: List[str] = field(default_factory=list)
    message: str = ""
    reason: str = ""


class SanctionLedger:
    """Records violations and escalates sanctions atomically."""

    def __init__(
        self,
        db: Session,
        *,
        temp_ban_hours: Optional[int] = None,
        appeal_url: Optional[str] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.temp_ban = timedelta(
            hours=temp_ban_hours if temp_ban_hours is not None else settings.temp_ban_hours
        )
        self.appeal_url = appeal_url or settings.appeal_url
        self.clock = clock

    def record_violation(
        self, username: str, matched_terms: Iterable[str] = ()
    ) -> SanctionOutcome:
        """Increment the user's warnings and apply the escalation in one statement.

        Raises ResourceNotFoundException when no such user exists. On a database
        error the transaction is rolled back and the error propagates; no sanction
        is recorded in that case.
        """
        terms = list(matched_terms)
        expiry = literal(self.clock() + self.temp_ban, User.ban_expiry.type)
        new_count = User.forum_warnings + 1
        # SET expressions see the pre-update row, so these test the ban already in force
        banned_forever = and_(User.is_banned.is_(True), User.ban_expiry.is_(None))
        banned_longer = and_(User.is_banned.is_(True), User.ban_expiry > expiry)

        stmt = (
            update(User)
            .where(User.username == username)
            .values(
                forum_warnings=new_count,
                is_banned=case(
                    (new_count >= TEMP_BAN_AT, true()),
                    else_=User.is_banned,
                ),
                ban_expiry=case(
                    (new_count >= PERMANENT_BAN_AT, null()),
                    (new_count != TEMP_BAN_AT, User.ban_expiry),
                    (banned_forever, null()),
                    (banned_longer, User.ban_expiry),
                    else_=expiry,
                ),
            )
            .execution_options(synchronize_session=False)
        )

        try:
            result = self.db.execute(stmt)
            if result.rowcount == 0:
                self.db.rollback()
                raise ResourceNotFoundException("User", username)
            row = self.db.execute(
                select(User.forum_warnings, User.is_banned, User.ban_expiry).where(
                    User.username == username
                )
            ).one()
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                "Failed to record violation for %s", username, extra={"username": username}
            )
            raise

        outcome = self._outcome(username, row.forum_warnings, row.is_banned, row.ban_expiry, terms)
        logger.info(
            "Recorded violation for %s: %s (warnings=%d)",
            username,
            outcome.action.value,
            outcome.warnings,
            extra={
                "username": username,
                "warnings": outcome.warnings,
                "action": outcome.action.value,
            },
        )
        return outcome

    def reset_warnings(self, username: str, *, commit: bool = True) -> int:
        """Zero the warning count without touching ban state. Returns the previous count."""
        previous = self.db.execute(
            select(User.forum_warnings).where(User.username == username)
        ).scalar_one_or_none()
        if previous is None:
            raise ResourceNotFoundException("User", username)
        self.db.execute(
            update(User)
            .where(User.username == username)
            .values(forum_warnings=0)
            .execution_options(synchronize_session=False)
        )
        if commit:
            self.db.commit()
        logger.info(
            "Reset warnings for %s (was %d)",
            username,
            previous,
            extra={"username": username, "warnings": 0},
        )
        return previous

    def _outcome(
        self,
        username: str,
        warnings: int,
        is_banned: bool,
        ban_expiry: Optional[datetime],
        terms: List[str],
    ) -> SanctionOutcome:
        action = action_for(warnings)
        if action is SanctionAction.TEMPORARY_BAN and is_banned and ban_expiry is None:
            # a standing permanent ban outranks the escalation step
            action = SanctionAction.PERMANENT_BAN
        found = describe(terms)
        if action is SanctionAction.PERMANENT_BAN:
            message = (
                "You have been permanently banned from the forum. "
                f"Please join our Discord server to appeal: {self.appeal_url}"
            )
            reason = f"Permanent ban: {found}"
        elif action is SanctionAction.TEMPORARY_BAN:
            hours = int(self.temp_ban.total_seconds() // 3600)
            message = (
                f"You have been temporarily banned for {hours} hours due to repeated "
                f"inappropriate language. Found: {found}"
            )
            reason = f"Temporary ban: {found}"
        else:
            message = (
                "Warning: Inappropriate language detected. Please use respectful "
                f"language. Found: {found}"
            )
            reason = f"Inappropriate language: {found}"
        return SanctionOutcome(
            username=username,
            warnings=warnings,
            is_banned=bool(is_banned),
            ban_expiry=as_utc(ban_expiry),
            action=action,
            matched_terms=terms,
            message=message,
            reason=reason,
        )


__all__ = [
    "PERMANENT_BAN_AT",
    "TEMP_BAN_AT",
    "SanctionAction",
    "SanctionLedger",
    "SanctionOutcome",
    "action_for",
]
