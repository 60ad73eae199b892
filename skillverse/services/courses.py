"""
Course service for SkillVerse
Course authoring, chapter management and quiz grading
"""

import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_
from sqlalchemy.orm import Session

from skillverse.core.exceptions import (
    AuthorizationException,
    InvalidOperationException,
    NotFoundException,
    ValidationException,
)
from skillverse.core.logging import LoggerFactory
from skillverse.models import Chapter, ChapterType, Course, Enrollment, User, UserRole
from skillverse.schemas.courses import (
    ChapterOutline,
    CourseCreate,
    CourseDetailResponse,
    CourseResponse,
    CourseUpdate,
    QuizDefinition,
)
from skillverse.schemas.users import PayoutDetails
from skillverse.services.cloudinary import PDF_FOLDER, VIDEO_FOLDER

logger = logging.getLogger(__name__)
audit_logger = LoggerFactory.get_audit_logger()

MEDIA_FOLDERS = {
    ChapterType.VIDEO: (VIDEO_FOLDER, "video"),
    ChapterType.PDF: (PDF_FOLDER, "raw"),
}


LIKE_ESCAPE = "\\"


def contains_pattern(text: str) -> str:
    """ILIKE pattern that matches text literally anywhere; pair with escape=LIKE_ESCAPE"""
    escaped = (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def _pydantic_errors(exc: PydanticValidationError) -> List[Dict[str, str]]:
    return [
        {"field": ".".join(str(loc) for loc in error["loc"]), "message": error["msg"]}
        for error in exc.errors()
    ]


class CourseService:
    """Course and chapter operations"""

    # Lookups and guards

    @staticmethod
    def get_course_or_404(db: Session, course_id: int) -> Course:
        course = db.get(Course, course_id)
        if course is None:
            raise NotFoundException("Course")
        return course

    @staticmethod
    def get_chapter_or_404(db: Session, course: Course, chapter_id: int) -> Chapter:
        chapter = (
            db.query(Chapter)
            .filter(Chapter.id == chapter_id, Chapter.course_id == course.id)
            .first()
        )
        if chapter is None:
            raise NotFoundException("Chapter")
        return chapter

    @staticmethod
    def ensure_creator(course: Course, user: User) -> None:
        if course.creator_id != user.id:
            raise AuthorizationException("Only the course creator can modify this course")

    @staticmethod
    def get_owned_course(db: Session, user: User, course_id: int) -> Course:
        course = CourseService.get_course_or_404(db, course_id)
        CourseService.ensure_creator(course, user)
        return course

    @staticmethod
    def get_owned_chapter(db: Session, user: User, course_id: int, chapter_id: int) -> Chapter:
        course = CourseService.get_owned_course(db, user, course_id)
        return CourseService.get_chapter_or_404(db, course, chapter_id)

    @staticmethod
    def is_enrolled(db: Session, user_id: int, course_id: int) -> bool:
        return (
            db.query(Enrollment.id)
            .filter(Enrollment.user_id == user_id, Enrollment.course_id == course_id)
            .first()
            is not None
        )

    @staticmethod
    def enrolled_course_ids(db: Session, user_id: int) -> set[int]:
        rows = db.query(Enrollment.course_id).filter(Enrollment.user_id == user_id).all()
        return {row[0] for row in rows}

    # Parsing helpers

    @staticmethod
    def parse_chapter_kind(value: str) -> ChapterType:
        try:
            return ChapterType((value or "").strip().lower())
        except ValueError:
            raise ValidationException(
                "Invalid content type", details={"allowed": [kind.value for kind in ChapterType]}
            )

    @staticmethod
    def parse_quiz(raw: Union[str, Dict[str, Any], QuizDefinition, None]) -> Dict[str, Any]:
        """
        Validate a quiz definition given as JSON text, a dict or a parsed model

        A quiz needs a title and at least one question; every question has
        exactly four options and a correct_index between 0 and 3.

        Raises:
            ValidationException: If the quiz is missing or malformed
        """
        if raw is None or raw == "":
            raise ValidationException("Quiz is required for quiz chapters")

        try:
            if isinstance(raw, QuizDefinition):
                quiz = raw
            elif isinstance(raw, (str, bytes)):
                quiz = QuizDefinition.model_validate_json(raw)
            else:
                quiz = QuizDefinition.model_validate(raw)
        except PydanticValidationError as e:
            raise ValidationException(
                "Invalid quiz format", details={"errors": _pydantic_errors(e)}
            )

        return quiz.model_dump()

    @staticmethod
    def resolve_payout(data: Optional[PayoutDetails], fallbacks: List[dict]) -> PayoutDetails:
        """First complete payout details among the request and stored snapshots"""
        candidates = [data] if data is not None else []
        candidates += [PayoutDetails(**fallback) for fallback in fallbacks]
        for candidate in candidates:
            if candidate.is_complete():
                return candidate
        raise ValidationException("For paid courses, provide UPI or full bank details")

    @staticmethod
    def _apply_payout(course: Course, payout: PayoutDetails) -> None:
        course.payout_upi_id = payout.upi_id
        course.payout_bank_name = payout.bank_name
        course.payout_account_number = payout.account_number
        course.payout_ifsc_code = payout.ifsc_code

    # Read operations

    @staticmethod
    def to_response(
        course: Course, viewer: Optional[User] = None, enrolled_ids: Optional[set] = None
    ) -> CourseResponse:
        response = CourseResponse.model_validate(course)
        if viewer is None:
            return response
        return response.model_copy(
            update={
                "is_enrolled": course.id in (enrolled_ids or set()),
                "is_creator": course.creator_id == viewer.id,
            }
        )

    @staticmethod
    def list_courses(
        db: Session, q: Optional[str] = None, viewer: Optional[User] = None
    ) -> List[CourseResponse]:
        """Search courses by title, description or category (case-insensitive)"""
        query = db.query(Course)
        if q and q.strip():
            pattern = contains_pattern(q.strip())
            query = query.filter(
                or_(
                    Course.title.ilike(pattern, escape=LIKE_ESCAPE),
                    Course.description.ilike(pattern, escape=LIKE_ESCAPE),
                    Course.category.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        courses = query.order_by(Course.created_at.desc(), Course.id.desc()).all()

        enrolled_ids = CourseService.enrolled_course_ids(db, viewer.id) if viewer else None
        return [CourseService.to_response(course, viewer, enrolled_ids) for course in courses]

    @staticmethod
    def get_course_detail(
        db: Session, course_id: int, viewer: Optional[User] = None
    ) -> CourseDetailResponse:
        course = CourseService.get_course_or_404(db, course_id)
        enrolled_ids = CourseService.enrolled_course_ids(db, viewer.id) if viewer else None
        summary = CourseService.to_response(course, viewer, enrolled_ids)
        outlines = [
            ChapterOutline(
                id=chapter.id,
                position=chapter.position,
                title=chapter.title,
                description=chapter.description,
                kind=chapter.kind,
            )
            for chapter in course.chapters
        ]
        return CourseDetailResponse(**summary.model_dump(), chapters=outlines)

    # Course writes

    @staticmethod
    def create_course(db: Session, user: User, data: CourseCreate) -> Course:
        if data.is_paid and data.price <= 0:
            raise ValidationException("Paid courses need a price greater than zero")

        course = Course(
            title=data.title.strip(),
            description=data.description.strip(),
            category=data.category,
            level=data.level,
            is_paid=data.is_paid,
            price=data.price if data.is_paid else 0.0,
            creator_id=user.id,
        )
        if data.payout_details is not None and data.payout_details.is_complete():
            CourseService._apply_payout(course, data.payout_details)

        if user.role == UserRole.USER:
            user.role = UserRole.INSTRUCTOR

        db.add(course)
        db.commit()
        db.refresh(course)

        logger.info(f"Course {course.id} created by user {user.id}")
        return course

    @staticmethod
    def update_course(db: Session, user: User, course_id: int, data: CourseUpdate) -> Course:
        """Update course details; paid courses snapshot the creator's payout details"""
        course = CourseService.get_owned_course(db, user, course_id)

        price = data.price if data.price is not None else course.price
        is_paid = data.is_paid if data.is_paid is not None else course.is_paid
        # A positive price on an otherwise free course turns it paid
        if data.is_paid is None and data.price is not None and data.price > 0:
            is_paid = True

        if is_paid:
            if price <= 0:
                raise ValidationException("Paid courses need a price greater than zero")
            payout = CourseService.resolve_payout(
                data.payout_details, [course.payout_details, user.payout_details]
            )
            CourseService._apply_payout(course, payout)

        if data.title:
            course.title = data.title.strip()
        if data.description:
            course.description = data.description.strip()
        if data.category is not None:
            course.category = data.category
        if data.level is not None:
            course.level = data.level

        course.is_paid = is_paid
        course.price = price if is_paid else 0.0

        db.commit()
        db.refresh(course)
        return course

    @staticmethod
    def delete_course(db: Session, user: User, course_id: int, is_admin: bool = False) -> None:
        """Delete a course with its chapters, enrollments, completions and ratings"""
        course = CourseService.get_course_or_404(db, course_id)
        if course.creator_id != user.id and not is_admin:
            raise AuthorizationException("Only the course creator can delete this course")

        as_admin = course.creator_id != user.id
        enrollment_count = len(course.enrollments)
        db.delete(course)
        db.commit()

        audit_logger.info(
            "Course deleted",
            extra={
                "course_id": course_id,
                "deleted_by": user.id,
                "as_admin": as_admin,
                "enrollments_removed": enrollment_count,
            },
        )

    # Chapter writes

    @staticmethod
    def add_chapter(
        db: Session,
        course: Course,
        kind: ChapterType,
        title: str,
        description: Optional[str] = "",
        media: Optional[Dict[str, str]] = None,
        quiz: Union[str, Dict[str, Any], None] = None,
    ) -> Chapter:
        """
        Append a chapter to a course the caller already owns

        Args:
            course: Course, already checked for ownership
            kind: Content mode of the chapter
            media: ``{"url", "public_id"}`` returned by media storage
            quiz: Quiz definition for quiz chapters
        """
        if not title or not title.strip():
            raise ValidationException("Chapter title is required")

        chapter = Chapter(
            title=title.strip(),
            description=(description or "").strip(),
            content_type=kind,
            position=len(course.chapters),
        )

        if kind == ChapterType.QUIZ:
            chapter.quiz = CourseService.parse_quiz(quiz)
        else:
            if not media:
                raise ValidationException(f"A {kind.value} file is required")
            chapter.media_url = media["url"]
            chapter.media_public_id = media.get("public_id")

        course.chapters.append(chapter)
        db.commit()
        db.refresh(chapter)

        logger.info(f"Chapter {chapter.id} ({kind.value}) added to course {course.id}")
        return chapter

    @staticmethod
    def update_chapter(
        db: Session,
        chapter: Chapter,
        title: Optional[str] = None,
        description: Optional[str] = None,
        kind: Optional[ChapterType] = None,
        media: Optional[Dict[str, str]] = None,
        quiz: Union[str, Dict[str, Any], None] = None,
    ) -> Chapter:
        """Edit an owned chapter; switching content mode requires the new content"""
        new_kind = kind or chapter.content_type

        if new_kind == ChapterType.QUIZ:
            if quiz:
                chapter.quiz = CourseService.parse_quiz(quiz)
            elif chapter.content_type != ChapterType.QUIZ:
                raise ValidationException("Quiz is required for quiz chapters")
            chapter.media_url = None
            chapter.media_public_id = None
        else:
            if media:
                chapter.media_url = media["url"]
                chapter.media_public_id = media.get("public_id")
            elif new_kind != chapter.content_type:
                raise ValidationException(f"A {new_kind.value} file is required")
            chapter.quiz = None

        chapter.content_type = new_kind
        if title and title.strip():
            chapter.title = title.strip()
        if description is not None:
            chapter.description = description.strip()

        db.commit()
        db.refresh(chapter)
        return chapter

    @staticmethod
    def set_chapter_quiz(
        db: Session, user: User, course_id: int, chapter_id: int, quiz: QuizDefinition
    ) -> Chapter:
        chapter = CourseService.get_owned_chapter(db, user, course_id, chapter_id)
        return CourseService.update_chapter(db, chapter, kind=ChapterType.QUIZ, quiz=quiz)

    @staticmethod
    def delete_chapter(db: Session, user: User, course_id: int, chapter_id: int) -> Chapter:
        """Remove a chapter and close the gap in positions"""
        course = CourseService.get_owned_course(db, user, course_id)
        chapter = CourseService.get_chapter_or_404(db, course, chapter_id)

        course.chapters.remove(chapter)
        for position, remaining in enumerate(course.chapters):
            remaining.position = position
        db.commit()

        logger.info(f"Chapter {chapter_id} deleted from course {course_id}")
        return chapter

    @staticmethod
    def reorder_chapters(
        db: Session, user: User, course_id: int, chapter_ids: List[int]
    ) -> List[Chapter]:
        """
        Apply a new chapter order

        Ids that do not belong to the course are ignored. Every existing
        chapter must appear in the list.
        """
        course = CourseService.get_owned_course(db, user, course_id)
        by_id = {chapter.id: chapter for chapter in course.chapters}

        ordered: List[Chapter] = []
        seen: set[int] = set()
        for chapter_id in chapter_ids:
            if chapter_id in by_id and chapter_id not in seen:
                ordered.append(by_id[chapter_id])
                seen.add(chapter_id)

        missing = sorted(set(by_id) - seen)
        if missing:
            raise ValidationException(
                "Every chapter of the course must be included when reordering",
                details={"missing_chapter_ids": missing},
            )

        for position, chapter in enumerate(ordered):
            chapter.position = position
        db.commit()
        db.expire(course, ["chapters"])

        return list(course.chapters)

    # Quiz grading

    @staticmethod
    def submit_quiz(
        db: Session, user: User, course_id: int, chapter_id: int, answers: List[int]
    ) -> dict:
        """Grade quiz answers for an enrolled learner or the creator"""
        course = CourseService.get_course_or_404(db, course_id)
        chapter = CourseService.get_chapter_or_404(db, course, chapter_id)

        if course.creator_id != user.id and not CourseService.is_enrolled(db, user.id, course.id):
            raise AuthorizationException("You are not enrolled in this course")

        if chapter.content_type != ChapterType.QUIZ or not chapter.quiz:
            raise InvalidOperationException("This chapter has no quiz")

        questions = chapter.quiz.get("questions", [])
        if len(answers) != len(questions):
            raise ValidationException(
                f"Expected {len(questions)} answers, got {len(answers)}"
            )

        correct = sum(
            1
            for question, answer in zip(questions, answers)
            if answer == question["correct_index"]
        )
        total = len(questions)

        return {
            "chapter_id": chapter.id,
            "correct": correct,
            "total": total,
            "score": round(100 * correct / total, 2) if total else 0.0,
        }
