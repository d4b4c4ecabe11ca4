"""JWT utilities for auth.

Responsibilities:
- Create HS256-signed access tokens with expirations.
- Resolve the current user (and admin) from the bearer token.
- Surface application errors (401 invalid_token, 403 permission_denied).
"""

# ============================================
# Imports and Dependencies
# ============================================
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlalchemy.orm import Session

from dear_diary.core.config import settings
from dear_diary.core.database import get_db
from dear_diary.core.exceptions import AdminRequiredException, InvalidTokenException
from dear_diary.modules.users.models import User

logger = logging.getLogger(__name__)

# Token is issued by the JSON login endpoint
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")


# ============================================
# Token Data Model
# ============================================
class TokenData(BaseModel):
    id: Optional[int] = None


# ============================================
# Token Creation Function
# ============================================
def create_access_token(data: dict) -> str:
    """Create a JWT access token.

    - Clones payload, normalizes user_id to int, and sets exp claim.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.access_token_expire_minutes
    )
    to_encode.update({"exp": expire})
    if "user_id" in to_encode:
        to_encode["user_id"] = int(to_encode["user_id"])
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


# ============================================
# Token Verification Function
# ============================================
def verify_access_token(token: str) -> TokenData:
    """Decode the token (signature, exp, user_id) or raise InvalidTokenException."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        logger.warning(f"JWT Error: {str(e)}")
        raise InvalidTokenException()

    user_id = payload.get("user_id")
    try:
        return TokenData(id=int(user_id))
    except (TypeError, ValueError):
        logger.warning(f"Invalid user_id in token payload: {user_id}")
        raise InvalidTokenException()


# ============================================
# Current User Retrieval Function
# ============================================
def get_current_user(
    token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)
) -> User:
    """Return the authenticated user; unknown subjects are rejected as invalid tokens."""
    token_data = verify_access_token(token)
    user = db.query(User).filter(User.id == token_data.id).first()
    if user is None:
        raise InvalidTokenException()
    return user


# ============================================
# Admin User Retrieval Function
# ============================================
def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    """Return current user if admin; otherwise raise 403."""
    if not current_user.is_admin:
        raise AdminRequiredException()
    return current_user
