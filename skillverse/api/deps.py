"""
Shared API dependencies
Collaborators are created in the application lifespan and kept on app.state
"""

from typing import Optional

from fastapi import Depends, Request

from skillverse.core.exceptions import AuthorizationException
from skillverse.core.security import get_current_user
from skillverse.models import User
from skillverse.services.admin import AdminPolicy
from skillverse.services.cloudinary import CloudinaryStorage
from skillverse.services.email import EmailService
from skillverse.services.identity import GoogleIdentityVerifier
from skillverse.services.payments import StripePaymentGateway


def get_payment_gateway(request: Request) -> StripePaymentGateway:
    return request.app.state.payment_gateway


def get_media_storage(request: Request) -> CloudinaryStorage:
    return request.app.state.media_storage


def get_mailer(request: Request) -> EmailService:
    return request.app.state.mailer


def get_identity_verifier(request: Request) -> GoogleIdentityVerifier:
    return request.app.state.identity_verifier


def get_admin_policy(request: Request) -> AdminPolicy:
    return request.app.state.admin_policy


def require_admin(
    current_user: User = Depends(get_current_user),
    admin_policy: AdminPolicy = Depends(get_admin_policy),
) -> User:
    """Dependency to require an administrator"""
    if not admin_policy.is_admin(current_user):
        raise AuthorizationException("Forbidden: Admin access required.")
    return current_user


def client_info(request: Request) -> dict:
    """Caller address and user agent recorded with logins"""
    ip: Optional[str] = request.client.host if request.client else None
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    return {"ip": ip, "user_agent": request.headers.get("user-agent")}
