"""
Authentication endpoints
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from skillverse.api.deps import client_info, get_identity_verifier, get_mailer
from skillverse.core.config import settings
from skillverse.core.database import get_db
from skillverse.core.security import get_current_user
from skillverse.models import User
from skillverse.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    GoogleAuthRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
)
from skillverse.schemas.users import UserResponse
from skillverse.services.auth import AuthService
from skillverse.services.email import EmailService
from skillverse.services.identity import GoogleIdentityVerifier

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
    mailer: EmailService = Depends(get_mailer),
    client: dict = Depends(client_info),
):
    """Register new user"""
    token, user = await AuthService.register(db, mailer, data, **client)
    return {"token": token, "user": user}


@router.post("/login", response_model=AuthResponse)
async def login(
    data: LoginRequest, db: Session = Depends(get_db), client: dict = Depends(client_info)
):
    """Login with email and password"""
    token, user = AuthService.login(db, data.email, data.password, **client)
    return {"token": token, "user": user}


@router.post("/google", response_model=AuthResponse)
async def google_login(
    data: GoogleAuthRequest,
    db: Session = Depends(get_db),
    verifier: GoogleIdentityVerifier = Depends(get_identity_verifier),
    mailer: EmailService = Depends(get_mailer),
    client: dict = Depends(client_info),
):
    """Login or sign up with a Google credential"""
    token, user = await AuthService.google_login(db, verifier, mailer, data.token, **client)
    return {"token": token, "user": user}


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    data: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    mailer: EmailService = Depends(get_mailer),
):
    await AuthService.forgot_password(db, mailer, data.email, settings.CLIENT_URL)
    return {"message": "Password reset email sent successfully"}


@router.get("/reset-password/{token}", response_model=MessageResponse)
async def validate_reset_token(token: str, db: Session = Depends(get_db)):
    AuthService.user_for_reset_token(db, token)
    return {"message": "Reset token is valid"}


@router.post("/reset-password/{token}", response_model=MessageResponse)
async def reset_password(token: str, data: ResetPasswordRequest, db: Session = Depends(get_db)):
    AuthService.reset_password(db, token, data.password)
    return {"message": "Password reset successfully"}


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    """Get current user"""
    return current_user
