"""
Course, chapter and rating models for SkillVerse
"""

import enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from skillverse.core.database import Base
from skillverse.models.base import utcnow


class ChapterType(enum.Enum):
    """What a chapter holds"""
    VIDEO = "video"
    PDF = "pdf"
    QUIZ = "quiz"


class Course(Base):
    """Course model"""
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False)
    category = Column(String(100), nullable=True, index=True)
    level = Column(String(50), nullable=True)

    is_paid = Column(Boolean, default=False, nullable=False)
    price = Column(Float, default=0.0, nullable=False)
    earnings = Column(Float, default=0.0, nullable=False)

    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Payout snapshot taken when the course is made paid
    payout_upi_id = Column(String, nullable=True)
    payout_bank_name = Column(String, nullable=True)
    payout_account_number = Column(String, nullable=True)
    payout_ifsc_code = Column(String, nullable=True)

    average_rating = Column(Float, default=0.0, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    creator = relationship("User", back_populates="authored_courses")
    chapters = relationship(
        "Chapter",
        back_populates="course",
        order_by="Chapter.position",
        cascade="all, delete-orphan",
    )
    ratings = relationship("CourseRating", back_populates="course", cascade="all, delete-orphan")
    enrollments = relationship("Enrollment", back_populates="course", cascade="all, delete-orphan")

    @property
    def creator_name(self) -> str:
        return self.creator.name if self.creator else ""

    @property
    def chapter_count(self) -> int:
        return len(self.chapters)

    @property
    def rating_count(self) -> int:
        return len(self.ratings)

    @property
    def payout_details(self) -> dict:
        return {
            "upi_id": self.payout_upi_id or "",
            "bank_name": self.payout_bank_name or "",
            "account_number": self.payout_account_number or "",
            "ifsc_code": self.payout_ifsc_code or "",
        }


class Chapter(Base):
    """One unit of course content: a video, a PDF or a quiz"""
    __tablename__ = "chapters"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, default=0, nullable=False)

    title = Column(String(200), nullable=False)
    description = Column(Text, default="")

    content_type = Column(Enum(ChapterType), nullable=False)
    media_url = Column(String, nullable=True)
    media_public_id = Column(String, nullable=True)
    quiz = Column(JSON, nullable=True)  # {"title": str, "questions": [...]}

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    course = relationship("Course", back_populates="chapters")
    completions = relationship(
        "ChapterCompletion", back_populates="chapter", cascade="all, delete-orphan"
    )

    @property
    def kind(self) -> str:
        return self.content_type.value

    @property
    def content(self) -> dict:
        """Tagged content variant exposed by the API"""
        if self.content_type == ChapterType.QUIZ:
            quiz = self.quiz or {}
            return {
                "kind": "quiz",
                "title": quiz.get("title", ""),
                "questions": quiz.get("questions", []),
            }
        return {
            "kind": self.content_type.value,
            "url": self.media_url or "",
            "public_id": self.media_public_id,
        }


class CourseRating(Base):
    """One rating per (course, user)"""
    __tablename__ = "course_ratings"
    __table_args__ = (UniqueConstraint("course_id", "user_id", name="uq_course_rating_user"),)

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    value = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    course = relationship("Course", back_populates="ratings")
