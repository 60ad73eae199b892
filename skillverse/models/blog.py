"""
Blog models for SkillVerse
"""

import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from skillverse.core.database import Base
from skillverse.models.base import utcnow


class VoteDirection(enum.Enum):
    UP = "up"
    DOWN = "down"


class Blog(Base):
    """Blog post model"""
    __tablename__ = "blogs"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    author = Column(String(50), nullable=False)
    tag = Column(String(50), nullable=False, index=True)
    content = Column(Text, nullable=False)

    upvotes = Column(Integer, default=0, nullable=False)
    downvotes = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    votes = relationship("BlogVote", back_populates="blog", cascade="all, delete-orphan")

    @property
    def vote_map(self) -> dict:
        return {str(vote.user_id): vote.direction.value for vote in self.votes}


class BlogVote(Base):
    """A user's current vote on a blog"""
    __tablename__ = "blog_votes"
    __table_args__ = (UniqueConstraint("blog_id", "user_id", name="uq_blog_vote_user"),)

    id = Column(Integer, primary_key=True, index=True)
    blog_id = Column(Integer, ForeignKey("blogs.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    direction = Column(Enum(VoteDirection), nullable=False)

    blog = relationship("Blog", back_populates="votes")
