"""
Security utilities for authentication and authorization
Handles JWT tokens, password hashing and the current-user dependencies
"""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from skillverse.core.config import settings
from skillverse.core.database import get_db
from skillverse.core.exceptions import AuthenticationException

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# HTTP Bearer scheme; missing credentials are reported by us, not by FastAPI
bearer_scheme = HTTPBearer(auto_error=False)


class SecurityUtils:
    """Security utility functions"""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
        """Verify a plain password against hashed password"""
        if not hashed_password:
            return False
        try:
            return pwd_context.verify(plain_password, hashed_password)
        except ValueError:
            logger.warning("Stored password hash could not be parsed")
            return False

    @staticmethod
    def get_password_hash(password: str) -> str:
        """Hash a password using bcrypt"""
        return pwd_context.hash(password)

    @staticmethod
    def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
        """
        Create JWT access token

        Args:
            user_id: Id stored in the ``sub`` claim
            expires_delta: Token lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES

        Returns:
            Encoded JWT token
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

        now = datetime.now(timezone.utc)
        to_encode = {"sub": str(user_id), "iat": now, "exp": now + expires_delta, "type": "access"}
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_token(token: str) -> Dict[str, Any]:
        """
        Decode JWT token

        Raises:
            AuthenticationException: If token is invalid or expired
        """
        try:
            return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except ExpiredSignatureError:
            raise AuthenticationException("Token has expired")
        except JWTError:
            raise AuthenticationException("Could not validate credentials")

    @staticmethod
    def generate_reset_token() -> str:
        """Generate a password reset token"""
        return secrets.token_hex(32)

    @staticmethod
    def hash_token(token: str) -> str:
        """Digest stored in place of a reset token"""
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    @staticmethod
    def validate_password_strength(password: str) -> tuple[bool, str]:
        if len(password) < settings.PASSWORD_MIN_LENGTH:
            return (
                False,
                f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long",
            )
        return True, ""


def _user_from_credentials(
    credentials: Optional[HTTPAuthorizationCredentials], db: Session
):
    from skillverse.models import User

    if credentials is None or not credentials.credentials:
        raise AuthenticationException("Not authorized, no token")

    payload = SecurityUtils.decode_token(credentials.credentials)
    subject = payload.get("sub")

    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise AuthenticationException("Invalid authentication credentials")

    user = db.get(User, user_id)
    if user is None:
        raise AuthenticationException("User not found")
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    db: Session = Depends(get_db),
):
    """
    Get current user from the bearer token

    Raises:
        AuthenticationException: If the token is missing, invalid or stale
    """
    return _user_from_credentials(credentials, db)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    db: Session = Depends(get_db),
):
    """Current user when a valid token is sent, otherwise None"""
    if credentials is None:
        return None
    try:
        return _user_from_credentials(credentials, db)
    except AuthenticationException:
        return None
