"""
SkillVerse Models Package
"""

from skillverse.models.blog import Blog, BlogVote, VoteDirection
from skillverse.models.chat import Chat, Message
from skillverse.models.course import Chapter, ChapterType, Course, CourseRating
from skillverse.models.enrollment import ChapterCompletion, Enrollment
from skillverse.models.user import User, UserRole

__all__ = [
    "User", "UserRole",
    "Course", "Chapter", "ChapterType", "CourseRating",
    "Enrollment", "ChapterCompletion",
    "Blog", "BlogVote", "VoteDirection",
    "Chat", "Message",
]
