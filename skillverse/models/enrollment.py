"""
Enrollment ledger models for SkillVerse
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from skillverse.core.database import Base
from skillverse.models.base import utcnow


class Enrollment(Base):
    """Grants one user access to one course"""
    __tablename__ = "enrollments"
    __table_args__ = (UniqueConstraint("user_id", "course_id", name="uq_enrollment_user_course"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    checkout_session_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    user = relationship("User", back_populates="enrollments")
    course = relationship("Course", back_populates="enrollments")
    completions = relationship(
        "ChapterCompletion", back_populates="enrollment", cascade="all, delete-orphan"
    )

    @property
    def completed_chapter_ids(self) -> list[int]:
        return sorted(completion.chapter_id for completion in self.completions)


class ChapterCompletion(Base):
    """A chapter finished within an enrollment"""
    __tablename__ = "chapter_completions"
    __table_args__ = (
        UniqueConstraint("enrollment_id", "chapter_id", name="uq_completion_enrollment_chapter"),
    )

    id = Column(Integer, primary_key=True, index=True)
    enrollment_id = Column(
        Integer, ForeignKey("enrollments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    chapter_id = Column(
        Integer, ForeignKey("chapters.id", ondelete="CASCADE"), nullable=False, index=True
    )
    completed_at = Column(DateTime, default=utcnow)

    enrollment = relationship("Enrollment", back_populates="completions")
    chapter = relationship("Chapter", back_populates="completions")
