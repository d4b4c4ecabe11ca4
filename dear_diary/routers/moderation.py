"""Moderation router: violation reporting and admin ban management."""

# =====================================================
# ==================== Imports ========================
# =====================================================
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dear_diary import oauth2
from dear_diary.core.database import get_db
from dear_diary.core.exceptions import PermissionDeniedException
from dear_diary.modules.moderation import ModerationAdmin, SanctionLedger
from dear_diary.modules.moderation.schemas import (
    AuditLogOut,
    BanRequest,
    SanctionOutcomeOut,
    UsernameRequest,
    WarnRequest,
)
from dear_diary.modules.users import User
from dear_diary.modules.users.schemas import UserOut

# =====================================================
# =============== Global Variables ====================
# =====================================================
router = APIRouter(prefix="/forum/moderation", tags=["Moderation"])


def get_moderation_admin(db: Session = Depends(get_db)) -> ModerationAdmin:
    return ModerationAdmin(db)


# =====================================================
# ==================== Endpoints ======================
# =====================================================


@router.post("/warn", response_model=SanctionOutcomeOut)
def warn_user(
    payload: WarnRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(oauth2.get_current_user),
):
    """
    Record one violation against `username`.

    Users may report their own flagged drafts; anyone else needs admin rights.
    """
    if payload.username != current_user.username and not current_user.is_admin:
        raise PermissionDeniedException(
            "You can only record violations for yourself unless you are an admin"
        )
    outcome = SanctionLedger(db).record_violation(
        payload.username, payload.matched_terms
    )
    return SanctionOutcomeOut.model_validate(outcome)


@router.post("/ban", response_model=UserOut)
def ban_user(
    payload: BanRequest,
    admin: ModerationAdmin = Depends(get_moderation_admin),
    current_user: User = Depends(oauth2.get_current_admin),
):
    """Ban until `until`, or permanently when it is omitted."""
    user = admin.ban(current_user, payload.username, payload.until)
    return UserOut.model_validate(user)


@router.post("/unban", response_model=UserOut)
def unban_user(
    payload: UsernameRequest,
    admin: ModerationAdmin = Depends(get_moderation_admin),
    current_user: User = Depends(oauth2.get_current_admin),
):
    return UserOut.model_validate(admin.unban(current_user, payload.username))


@router.post("/reset-warnings", response_model=UserOut)
def reset_warnings(
    payload: UsernameRequest,
    admin: ModerationAdmin = Depends(get_moderation_admin),
    current_user: User = Depends(oauth2.get_current_admin),
):
    return UserOut.model_validate(admin.reset_warnings(current_user, payload.username))


@router.get("/audit", response_model=List[AuditLogOut])
def audit_log(
    limit: int = Query(50, ge=1, le=500),
    admin: ModerationAdmin = Depends(get_moderation_admin),
    current_user: User = Depends(oauth2.get_current_admin),
):
    return [AuditLogOut.model_validate(row) for row in admin.audit_log(current_user, limit)]
