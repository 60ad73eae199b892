"""
User model for SkillVerse
"""

import enum

from sqlalchemy import JSON, Boolean, Column, DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import relationship

from skillverse.core.database import Base
from skillverse.models.base import utcnow

DEFAULT_AVATAR_URL = "https://res.cloudinary.com/demo/image/upload/v1699999999/default-avatar.png"


class UserRole(enum.Enum):
    """User roles"""
    USER = "user"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"


class User(Base):
    """User model"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(50), nullable=False)

    # At least one of these identifies how the user signs in
    hashed_password = Column(String, nullable=True)
    google_id = Column(String, unique=True, index=True, nullable=True)

    role = Column(Enum(UserRole), default=UserRole.USER, nullable=False)
    avatar_url = Column(String, default=DEFAULT_AVATAR_URL)
    bio = Column(Text, nullable=True)

    skills = Column(JSON, default=list)
    achievements = Column(JSON, default=list)
    profile_links = Column(JSON, default=dict)

    payout_upi_id = Column(String, nullable=True)
    payout_bank_name = Column(String, nullable=True)
    payout_account_number = Column(String, nullable=True)
    payout_ifsc_code = Column(String, nullable=True)

    is_email_verified = Column(Boolean, default=False)
    reset_password_token = Column(String, nullable=True, index=True)
    reset_password_expires = Column(DateTime, nullable=True)

    last_login = Column(DateTime, nullable=True)
    login_history = Column(JSON, default=list)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    enrollments = relationship("Enrollment", back_populates="user", cascade="all, delete-orphan")
    authored_courses = relationship("Course", back_populates="creator")

    @property
    def enrolled_courses(self):
        """Courses the user holds an enrollment in"""
        return [enrollment.course for enrollment in self.enrollments]

    @property
    def created_courses(self):
        return list(self.authored_courses)

    @property
    def payout_details(self) -> dict:
        return {
            "upi_id": self.payout_upi_id or "",
            "bank_name": self.payout_bank_name or "",
            "account_number": self.payout_account_number or "",
            "ifsc_code": self.payout_ifsc_code or "",
        }
