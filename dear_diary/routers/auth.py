"""Authentication router: register, login and the caller's own profile."""

# =====================================================
# ==================== Imports ========================
# =====================================================
from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from dear_diary import oauth2
from dear_diary.core.database import get_db
from dear_diary.core.middleware.rate_limit import limiter
from dear_diary.modules.moderation import BanState, ModerationAdmin
from dear_diary.modules.users import User, UserService
from dear_diary.modules.users.schemas import Token, UserCreate, UserLogin, UserOut

# =====================================================
# =============== Global Variables ====================
# =====================================================
router = APIRouter(prefix="/auth", tags=["Authentication"])


def _token_for(user: User) -> Token:
    access_token = oauth2.create_access_token(data={"user_id": user.id})
    return Token(token=access_token, user=UserOut.model_validate(user))


# =====================================================
# ==================== Endpoints ======================
# =====================================================


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=Token)
@limiter.limit("10/hour")
def register_user(
    request: Request,
    payload: UserCreate,
    db: Session = Depends(get_db),
):
    """
    Register a new user and return a token. The first account becomes the admin.
    """
    new_user = UserService(db).create_user(payload)
    return _token_for(new_user)


@router.post("/login", response_model=Token)
@limiter.limit("6/minute")
def login(
    request: Request,
    credentials: UserLogin,
    db: Session = Depends(get_db),
):
    """
    Log in with email and password.

    An expired temporary ban is lifted here so the returned profile is current.
    """
    user = UserService(db).authenticate(credentials.email, credentials.password)
    BanState(db).is_blocked(user)
    return _token_for(user)


@router.get("/me", response_model=UserOut)
def read_me(
    db: Session = Depends(get_db),
    current_user: User = Depends(oauth2.get_current_user),
):
    """Caller's profile including warnings and ban state."""
    BanState(db).is_blocked(current_user)
    return UserOut.model_validate(current_user)


@router.get("/users", response_model=List[UserOut])
def list_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(oauth2.get_current_admin),
):
    """Admin only: every user with current ban fields."""
    users = ModerationAdmin(db).list_users(current_user)
    return [UserOut.model_validate(user) for user in users]
