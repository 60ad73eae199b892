"""Course rating aggregate"""

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from skillverse.core.exceptions import AuthorizationException, ValidationException
from skillverse.models import CourseRating, User
from skillverse.services.courses import CourseService

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


class RatingService:
    @staticmethod
    def recompute_average(db: Session, course_id: int) -> tuple[float, int]:
        """Mean of all rating values for the course, 0 when there are none"""
        average, count = (
            db.query(func.avg(CourseRating.value), func.count(CourseRating.id))
            .filter(CourseRating.course_id == course_id)
            .one()
        )
        return (float(average) if average is not None else 0.0), int(count)

    @staticmethod
    def get_rating(db: Session, course_id: int, user_id: int) -> Optional[CourseRating]:
        return (
            db.query(CourseRating)
            .filter(CourseRating.course_id == course_id, CourseRating.user_id == user_id)
            .first()
        )

    @staticmethod
    def rate(db: Session, user: User, course_id: int, value: int) -> dict:
        """
        Create or replace the caller's rating and refresh the course average

        Raises:
            ValidationException: If value is outside 1..5
            NotFoundException: If the course does not exist
            AuthorizationException: If the caller is not enrolled
        """
        if not isinstance(value, int) or not MIN_RATING <= value <= MAX_RATING:
            raise ValidationException(
                f"Please provide a rating between {MIN_RATING} and {MAX_RATING}."
            )

        course = CourseService.get_course_or_404(db, course_id)
        if not CourseService.is_enrolled(db, user.id, course.id):
            raise AuthorizationException("You must be enrolled to rate this course.")

        rating = RatingService.get_rating(db, course.id, user.id)
        if rating is None:
            db.add(CourseRating(course_id=course.id, user_id=user.id, value=value))
        else:
            rating.value = value

        try:
            db.flush()
        except IntegrityError:
            # Lost an insert race with the same user; the retry replaces that row
            db.rollback()
            return RatingService.rate(db, user, course_id, value)

        course.average_rating, count = RatingService.recompute_average(db, course.id)
        db.commit()

        logger.info(f"User {user.id} rated course {course.id}: {value}")
        return {
            "message": "Thank you for your rating!",
            "average_rating": course.average_rating,
            "rating_count": count,
        }
