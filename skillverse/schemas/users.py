"""
User schemas for SkillVerse
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from skillverse.models.user import UserRole


class UserBrief(BaseModel):
    """Minimal user card used inside other payloads"""
    id: int
    name: str
    avatar_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserSummary(UserBrief):
    """User returned with auth responses"""
    email: EmailStr
    role: UserRole


class PayoutDetails(BaseModel):
    """UPI id or bank account for creator payouts"""
    upi_id: Optional[str] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    ifsc_code: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def strip_blank(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    def is_complete(self) -> bool:
        has_bank = bool(self.bank_name and self.account_number and self.ifsc_code)
        return bool(self.upi_id) or has_bank


class UserResponse(UserSummary):
    """Current user details"""
    bio: Optional[str] = None
    skills: List[str] = []
    achievements: List[str] = []
    profile_links: Dict[str, str] = {}
    payout_details: PayoutDetails = PayoutDetails()
    is_email_verified: bool = False
    created_at: Optional[datetime] = None


class PublicUser(UserBrief):
    """User card for teammate search and public profiles"""
    skills: List[str] = []
    achievements: List[str] = []
    profile_links: Dict[str, str] = {}


class ProfileUpdate(BaseModel):
    """Profile update schema"""
    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    bio: Optional[str] = Field(default=None, max_length=500)
    skills: Optional[List[str]] = None
    achievements: Optional[List[str]] = None
    profile_links: Optional[Dict[str, str]] = None

    @field_validator("skills", "achievements")
    @classmethod
    def strip_items(cls, value):
        if value is None:
            return value
        return [item.strip() for item in value if item and item.strip()]
