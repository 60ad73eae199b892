"""
Authentication schemas for SkillVerse
"""

from pydantic import BaseModel, EmailStr, Field

from skillverse.schemas.users import UserSummary


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class GoogleAuthRequest(BaseModel):
    """ID token or OAuth access token issued by Google"""
    token: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    password: str


class AuthResponse(BaseModel):
    """Token response schema"""
    success: bool = True
    token: str
    token_type: str = "bearer"
    user: UserSummary


class MessageResponse(BaseModel):
    success: bool = True
    message: str
