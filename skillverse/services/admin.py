"""Administrator capability and maintenance operations"""

import logging
from typing import Iterable

from sqlalchemy.orm import Session

from skillverse.core.logging import LoggerFactory
from skillverse.models import Blog, Course, User, UserRole

logger = logging.getLogger(__name__)
audit_logger = LoggerFactory.get_audit_logger()


class AdminPolicy:
    """Decides who holds blanket delete rights over courses and blogs"""

    def __init__(self, admin_emails: Iterable[str] = ()):
        self.admin_emails = {email.strip().lower() for email in admin_emails if email.strip()}

    def is_admin(self, user: User) -> bool:
        if user is None:
            return False
        if user.role == UserRole.ADMIN:
            return True
        return (user.email or "").lower() in self.admin_emails


class AdminService:
    @staticmethod
    def clear_data(db: Session, admin: User) -> dict:
        """Delete every course and blog along with their dependents"""
        courses = db.query(Course).all()
        blogs = db.query(Blog).all()

        for course in courses:
            db.delete(course)
        for blog in blogs:
            db.delete(blog)
        db.commit()

        audit_logger.warning(
            "Content cleared",
            extra={
                "admin_id": admin.id,
                "deleted_courses": len(courses),
                "deleted_blogs": len(blogs),
            },
        )
        return {
            "message": "Database cleared successfully.",
            "deleted_courses": len(courses),
            "deleted_blogs": len(blogs),
        }
