"""
User service for SkillVerse
Profiles, payout details, teammate search and the creator dashboard
"""

import logging
from typing import List, Optional

from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Session

from skillverse.core.exceptions import NotFoundException, ValidationException
from skillverse.models import Chat, Course, User
from skillverse.schemas.chats import ChatResponse
from skillverse.schemas.users import PayoutDetails, ProfileUpdate, PublicUser, UserBrief
from skillverse.services.blogs import BlogService
from skillverse.services.courses import LIKE_ESCAPE, CourseService, contains_pattern
from skillverse.services.enrollment import EnrollmentService

logger = logging.getLogger(__name__)

INBOX_PREVIEW_SIZE = 5


class UserService:
    @staticmethod
    def get_user_or_404(db: Session, user_id: int) -> User:
        user = db.get(User, user_id)
        if user is None:
            raise NotFoundException("User")
        return user

    @staticmethod
    def search(db: Session, q: Optional[str] = None, exclude_id: Optional[int] = None) -> List[User]:
        """Users whose name, skills or achievements contain q (case-insensitive)"""
        query = db.query(User)
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        if q and q.strip():
            pattern = contains_pattern(q.strip())
            query = query.filter(
                or_(
                    User.name.ilike(pattern, escape=LIKE_ESCAPE),
                    cast(User.skills, String).ilike(pattern, escape=LIKE_ESCAPE),
                    cast(User.achievements, String).ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        return query.order_by(User.name, User.id).all()

    @staticmethod
    def update_profile(db: Session, user: User, data: ProfileUpdate) -> User:
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in changes.items():
            setattr(user, field, value)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def update_payout_details(db: Session, user: User, data: PayoutDetails) -> User:
        if not data.is_complete():
            raise ValidationException("Provide either UPI or full bank details")

        user.payout_upi_id = data.upi_id
        user.payout_bank_name = data.bank_name
        user.payout_account_number = data.account_number
        user.payout_ifsc_code = data.ifsc_code
        db.commit()
        db.refresh(user)

        logger.info(f"Payout details updated for user {user.id}")
        return user

    @staticmethod
    def update_avatar(db: Session, user: User, avatar_url: str) -> User:
        user.avatar_url = avatar_url
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def public_profile(db: Session, user_id: int) -> dict:
        user = UserService.get_user_or_404(db, user_id)
        return {
            "user": PublicUser.model_validate(user),
            "created_courses": [CourseService.to_response(c) for c in user.created_courses],
            "enrolled_courses": [CourseService.to_response(c) for c in user.enrolled_courses],
        }

    @staticmethod
    def dashboard(db: Session, user: User) -> dict:
        """Everything the dashboard page renders in one payload"""
        created = (
            db.query(Course)
            .filter(Course.creator_id == user.id)
            .order_by(Course.created_at.desc(), Course.id.desc())
            .all()
        )

        progress = []
        for enrollment in user.enrollments:
            course_progress = EnrollmentService.progress(enrollment, enrollment.course)
            progress.append(
                {
                    "course_id": enrollment.course_id,
                    "title": enrollment.course.title,
                    "completed": course_progress["completed"],
                    "total": course_progress["total"],
                    "percent": course_progress["percent"],
                }
            )

        inbox = (
            db.query(Chat)
            .filter(or_(Chat.user_low_id == user.id, Chat.user_high_id == user.id))
            .order_by(Chat.updated_at.desc(), Chat.id.desc())
            .limit(INBOX_PREVIEW_SIZE)
            .all()
        )

        return {
            "profile": {
                **UserBrief.model_validate(user).model_dump(),
                "email": user.email,
                "bio": user.bio,
                "skills": user.skills or [],
                "achievements": user.achievements or [],
                "profile_links": user.profile_links or {},
            },
            "created_courses": [
                {
                    "id": course.id,
                    "title": course.title,
                    "price": course.price,
                    "earnings": course.earnings,
                    "is_paid": course.is_paid,
                    "chapter_count": course.chapter_count,
                }
                for course in created
            ],
            "created_blogs": [
                {
                    "id": blog.id,
                    "title": blog.title,
                    "tag": blog.tag,
                    "upvotes": blog.upvotes,
                    "downvotes": blog.downvotes,
                    "created_at": blog.created_at,
                }
                for blog in BlogService.list_by_author(db, user.id)
            ],
            "total_earnings": sum(course.earnings or 0.0 for course in created),
            "enrolled_courses": [
                {"id": enrollment.course_id, "title": enrollment.course.title}
                for enrollment in user.enrollments
            ],
            "progress": progress,
            "inbox": [ChatResponse.model_validate(chat) for chat in inbox],
        }
