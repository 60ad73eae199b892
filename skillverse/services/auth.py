"""
Authentication service for SkillVerse
"""

import logging
from datetime import timedelta
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from skillverse.core.config import settings
from skillverse.core.exceptions import (
    AuthenticationException,
    DuplicateException,
    ExternalServiceException,
    NotFoundException,
    ValidationException,
)
from skillverse.core.security import SecurityUtils
from skillverse.models import User
from skillverse.models.base import utcnow
from skillverse.schemas.auth import RegisterRequest
from skillverse.services.email import EmailService
from skillverse.services.identity import GoogleIdentityVerifier

logger = logging.getLogger(__name__)

LOGIN_HISTORY_SIZE = 10


class AuthService:
    """Authentication service"""

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.strip().lower()).first()

    @staticmethod
    def ensure_password_strength(password: str) -> None:
        is_valid, error = SecurityUtils.validate_password_strength(password)
        if not is_valid:
            raise ValidationException(error)

    @staticmethod
    def record_login(user: User, ip: Optional[str] = None, user_agent: Optional[str] = None) -> None:
        """Stamp last_login and keep the most recent login entries"""
        now = utcnow()
        user.last_login = now
        entry = {"timestamp": now.isoformat(), "ip": ip, "user_agent": user_agent}
        user.login_history = (list(user.login_history or []) + [entry])[-LOGIN_HISTORY_SIZE:]

    @staticmethod
    async def register(
        db: Session,
        mailer: EmailService,
        data: RegisterRequest,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Tuple[str, User]:
        """
        Create a password account and sign it in

        Raises:
            DuplicateException: If the email is taken
            ValidationException: If the password is too short
        """
        email = data.email.lower()
        if AuthService.get_by_email(db, email) is not None:
            raise DuplicateException("User with this email already exists")
        AuthService.ensure_password_strength(data.password)

        user = User(
            name=data.name.strip(),
            email=email,
            hashed_password=SecurityUtils.get_password_hash(data.password),
            is_email_verified=False,
        )
        AuthService.record_login(user, ip, user_agent)
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise DuplicateException("User with this email already exists")
        db.refresh(user)

        logger.info(f"User {user.id} registered")
        await mailer.send_login_notification(user.email, user.name)
        return SecurityUtils.create_access_token(user.id), user

    @staticmethod
    def login(
        db: Session,
        email: str,
        password: str,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Tuple[str, User]:
        user = AuthService.get_by_email(db, email)
        if user is None or not SecurityUtils.verify_password(password, user.hashed_password):
            raise AuthenticationException("Invalid credentials")

        AuthService.record_login(user, ip, user_agent)
        db.commit()
        db.refresh(user)
        return SecurityUtils.create_access_token(user.id), user

    @staticmethod
    async def google_login(
        db: Session,
        verifier: GoogleIdentityVerifier,
        mailer: EmailService,
        credential: str,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Tuple[str, User]:
        """Sign in with Google, linking to an existing account by email"""
        identity = await verifier.verify(credential)

        user = db.query(User).filter(User.google_id == identity.subject).first()
        if user is None:
            user = AuthService.get_by_email(db, identity.email)

        if user is None:
            user = User(
                name=identity.name[:50],
                email=identity.email,
                google_id=identity.subject,
                is_email_verified=True,
            )
            if identity.picture:
                user.avatar_url = identity.picture
            db.add(user)
            logger.info(f"Creating account for Google user {identity.email}")
        else:
            if not user.google_id:
                user.google_id = identity.subject
            if identity.picture:
                user.avatar_url = identity.picture
            user.is_email_verified = True

        AuthService.record_login(user, ip, user_agent)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise DuplicateException("Account already linked to another Google identity")
        db.refresh(user)

        await mailer.send_login_notification(user.email, user.name, via="Google")
        return SecurityUtils.create_access_token(user.id), user

    @staticmethod
    async def forgot_password(
        db: Session, mailer: EmailService, email: str, client_url: str
    ) -> None:
        """
        Issue a reset token and mail the reset link

        Only the sha256 digest of the token is stored. If the mail cannot be
        sent the token is cleared again and the failure is raised.
        """
        user = AuthService.get_by_email(db, email)
        if user is None:
            raise NotFoundException("User")

        token = SecurityUtils.generate_reset_token()
        user.reset_password_token = SecurityUtils.hash_token(token)
        user.reset_password_expires = utcnow() + timedelta(
            minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES
        )
        db.commit()

        reset_url = f"{client_url}/reset-password/{token}"
        try:
            await mailer.send_password_reset_email(user.email, reset_url)
        except ExternalServiceException:
            user.reset_password_token = None
            user.reset_password_expires = None
            db.commit()
            raise

        logger.info(f"Password reset issued for user {user.id}")

    @staticmethod
    def user_for_reset_token(db: Session, token: str) -> User:
        user = (
            db.query(User)
            .filter(
                User.reset_password_token == SecurityUtils.hash_token(token),
                User.reset_password_expires > utcnow(),
            )
            .first()
        )
        if user is None:
            raise ValidationException("Invalid or expired reset token")
        return user

    @staticmethod
    def reset_password(db: Session, token: str, password: str) -> None:
        AuthService.ensure_password_strength(password)
        user = AuthService.user_for_reset_token(db, token)

        user.hashed_password = SecurityUtils.get_password_hash(password)
        user.reset_password_token = None
        user.reset_password_expires = None
        db.commit()

        logger.info(f"Password reset completed for user {user.id}")
