"""
Enrollment and progress service for SkillVerse
"""

import logging
import math
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from skillverse.core.exceptions import (
    AuthorizationException,
    DuplicateException,
    InvalidOperationException,
)
from skillverse.core.logging import LoggerFactory
from skillverse.models import ChapterCompletion, Course, Enrollment, User
from skillverse.services.courses import CourseService

logger = logging.getLogger(__name__)
audit_logger = LoggerFactory.get_audit_logger()


def progress_percent(completed: int, total: int) -> int:
    """Completion percentage rounded half up; 0 for a course without chapters"""
    if total <= 0:
        return 0
    return int(math.floor(100 * completed / total + 0.5))


class EnrollmentService:
    """Enrollment ledger operations"""

    @staticmethod
    def get_enrollment(db: Session, user_id: int, course_id: int) -> Optional[Enrollment]:
        return (
            db.query(Enrollment)
            .filter(Enrollment.user_id == user_id, Enrollment.course_id == course_id)
            .first()
        )

    @staticmethod
    def progress(enrollment: Optional[Enrollment], course: Course) -> dict:
        """Completed chapter ids, chapter count and percentage for one enrollment"""
        chapter_ids = {chapter.id for chapter in course.chapters}
        completed = (
            [cid for cid in enrollment.completed_chapter_ids if cid in chapter_ids]
            if enrollment
            else []
        )
        total = len(chapter_ids)
        return {
            "completed_chapters": completed,
            "completed": len(completed),
            "total": total,
            "percent": progress_percent(len(completed), total),
        }

    @staticmethod
    def enroll(db: Session, user: User, course_id: int) -> Enrollment:
        """
        Enroll a user in a free course

        Raises:
            NotFoundException: If the course does not exist
            InvalidOperationException: If the course is paid or the user created it
            DuplicateException: If the user is already enrolled
        """
        course = CourseService.get_course_or_404(db, course_id)

        if course.creator_id == user.id:
            raise InvalidOperationException("You can't enroll in your own course")
        if course.is_paid:
            raise InvalidOperationException("Cannot enroll in paid course via this route")
        if EnrollmentService.get_enrollment(db, user.id, course.id) is not None:
            raise DuplicateException("Already enrolled in this course")

        enrollment = Enrollment(user_id=user.id, course_id=course.id)
        db.add(enrollment)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise DuplicateException("Already enrolled in this course")
        db.refresh(enrollment)

        audit_logger.info(
            "Free enrollment", extra={"user_id": user.id, "course_id": course.id}
        )
        return enrollment

    @staticmethod
    def mark_chapter_complete(db: Session, user: User, course_id: int, chapter_id: int) -> dict:
        """Record a finished chapter; repeating the call changes nothing"""
        course = CourseService.get_course_or_404(db, course_id)
        chapter = CourseService.get_chapter_or_404(db, course, chapter_id)

        enrollment = EnrollmentService.get_enrollment(db, user.id, course.id)
        if enrollment is None:
            raise AuthorizationException("Not enrolled in course")

        message = "Chapter already completed"
        if chapter.id not in enrollment.completed_chapter_ids:
            db.add(ChapterCompletion(enrollment_id=enrollment.id, chapter_id=chapter.id))
            try:
                db.commit()
                message = "Chapter marked as complete"
            except IntegrityError:
                # A concurrent request recorded the same completion
                db.rollback()
            db.refresh(enrollment)

        progress = EnrollmentService.progress(enrollment, course)
        return {
            "message": message,
            "course_id": course.id,
            "completed_chapters": progress["completed_chapters"],
            "total_chapters": progress["total"],
            "progress": progress["percent"],
        }

    @staticmethod
    def course_content(db: Session, user: User, course_id: int) -> dict:
        """Full chapter content for the creator or an enrolled learner"""
        course = CourseService.get_course_or_404(db, course_id)
        enrollment = EnrollmentService.get_enrollment(db, user.id, course.id)

        if enrollment is None and course.creator_id != user.id:
            raise AuthorizationException("Not enrolled in course")

        progress = EnrollmentService.progress(enrollment, course)
        return {
            "course_id": course.id,
            "title": course.title,
            "chapters": list(course.chapters),
            "completed_chapters": progress["completed_chapters"],
            "progress": progress["percent"],
        }

    @staticmethod
    def list_available(db: Session, user: User) -> List[Course]:
        """Courses the user is not enrolled in"""
        enrolled = select(Enrollment.course_id).where(Enrollment.user_id == user.id)
        return (
            db.query(Course)
            .filter(Course.id.not_in(enrolled))
            .order_by(Course.created_at.desc(), Course.id.desc())
            .all()
        )
