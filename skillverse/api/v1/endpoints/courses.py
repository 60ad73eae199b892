"""
Course endpoints
Courses, chapters, enrollment, progress, quizzes and ratings
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from skillverse.api.deps import get_admin_policy, get_media_storage
from skillverse.core.database import get_db
from skillverse.core.security import get_current_user, get_optional_user
from skillverse.models import ChapterType, User
from skillverse.schemas.courses import (
    ChapterResponse,
    CourseContentResponse,
    CourseCreate,
    CourseDetailResponse,
    CourseListResponse,
    CourseResponse,
    CourseUpdate,
    EnrollRequest,
    ProgressResponse,
    QuizDefinition,
    QuizResult,
    QuizSubmission,
    RateRequest,
    RatingResponse,
    ReorderRequest,
)
from skillverse.services.admin import AdminPolicy
from skillverse.services.cloudinary import CloudinaryStorage
from skillverse.services.courses import MEDIA_FOLDERS, CourseService
from skillverse.services.enrollment import EnrollmentService
from skillverse.services.ratings import RatingService


router = APIRouter()


async def _upload_chapter_media(
    storage: CloudinaryStorage,
    kind: ChapterType,
    video: Optional[UploadFile],
    pdf: Optional[UploadFile],
) -> Optional[dict]:
    upload = video if kind == ChapterType.VIDEO else pdf if kind == ChapterType.PDF else None
    if upload is None:
        return None
    folder, resource_type = MEDIA_FOLDERS[kind]
    return await run_in_threadpool(
        storage.upload, upload.file, folder, resource_type, upload.filename
    )


async def _discard_media(
    storage: CloudinaryStorage, kind: ChapterType, public_id: Optional[str]
) -> None:
    if public_id and kind in MEDIA_FOLDERS:
        _, resource_type = MEDIA_FOLDERS[kind]
        await run_in_threadpool(storage.delete, public_id, resource_type)


@router.get("/", response_model=CourseListResponse)
async def list_courses(
    q: Optional[str] = Query(None, description="Search title, description or category"),
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    """List courses, flagged with enrollment for signed-in viewers"""
    return {"courses": CourseService.list_courses(db, q, viewer)}


@router.post("/", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
async def create_course(
    data: CourseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    course = CourseService.create_course(db, current_user, data)
    return CourseService.to_response(course, current_user)


@router.get("/available", response_model=List[CourseResponse])
async def list_available_courses(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    """Courses the caller is not enrolled in"""
    courses = EnrollmentService.list_available(db, current_user)
    return [CourseService.to_response(course, current_user) for course in courses]


@router.post("/enroll", status_code=status.HTTP_201_CREATED)
async def enroll_in_course(
    data: EnrollRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Enroll in a free course"""
    enrollment = EnrollmentService.enroll(db, current_user, data.course_id)
    return {"message": "Enrolled successfully", "course_id": enrollment.course_id}


@router.get("/{course_id}", response_model=CourseDetailResponse)
async def get_course(
    course_id: int,
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    return CourseService.get_course_detail(db, course_id, viewer)


@router.put("/{course_id}", response_model=CourseResponse)
async def update_course(
    course_id: int,
    data: CourseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    course = CourseService.update_course(db, current_user, course_id, data)
    return CourseService.to_response(course, current_user)


@router.delete("/{course_id}")
async def delete_course(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    admin_policy: AdminPolicy = Depends(get_admin_policy),
):
    """Delete a course (creator or administrator)"""
    CourseService.delete_course(
        db, current_user, course_id, is_admin=admin_policy.is_admin(current_user)
    )
    return {"message": "Course deleted successfully"}


@router.get("/{course_id}/content", response_model=CourseContentResponse)
async def get_course_content(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Chapter content for the creator or enrolled learners"""
    return EnrollmentService.course_content(db, current_user, course_id)


@router.post(
    "/{course_id}/chapters",
    response_model=ChapterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_chapter(
    course_id: int,
    title: str = Form(...),
    type: str = Form(...),
    description: Optional[str] = Form(""),
    quiz: Optional[str] = Form(None),
    video: Optional[UploadFile] = File(None),
    pdf: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: CloudinaryStorage = Depends(get_media_storage),
):
    """Add a video, PDF or quiz chapter"""
    course = CourseService.get_owned_course(db, current_user, course_id)
    kind = CourseService.parse_chapter_kind(type)
    media = await _upload_chapter_media(storage, kind, video, pdf)
    try:
        return CourseService.add_chapter(
            db, course, kind, title, description, media=media, quiz=quiz
        )
    except Exception:
        if media:
            await _discard_media(storage, kind, media.get("public_id"))
        raise


@router.put("/{course_id}/chapters/{chapter_id}", response_model=ChapterResponse)
async def update_chapter(
    course_id: int,
    chapter_id: int,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    type: Optional[str] = Form(None),
    quiz: Optional[str] = Form(None),
    video: Optional[UploadFile] = File(None),
    pdf: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: CloudinaryStorage = Depends(get_media_storage),
):
    chapter = CourseService.get_owned_chapter(db, current_user, course_id, chapter_id)
    kind = CourseService.parse_chapter_kind(type) if type else chapter.content_type
    previous_kind, previous_public_id = chapter.content_type, chapter.media_public_id
    media = await _upload_chapter_media(storage, kind, video, pdf)
    try:
        chapter = CourseService.update_chapter(
            db, chapter, title=title, description=description, kind=kind, media=media, quiz=quiz
        )
    except Exception:
        if media:
            await _discard_media(storage, kind, media.get("public_id"))
        raise

    # Replaced or dropped media no longer belongs to any chapter
    if previous_public_id and previous_public_id != chapter.media_public_id:
        await _discard_media(storage, previous_kind, previous_public_id)
    return chapter


@router.delete("/{course_id}/chapters/{chapter_id}")
async def delete_chapter(
    course_id: int,
    chapter_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: CloudinaryStorage = Depends(get_media_storage),
):
    chapter = CourseService.delete_chapter(db, current_user, course_id, chapter_id)
    await _discard_media(storage, chapter.content_type, chapter.media_public_id)
    return {"message": "Chapter deleted successfully"}


@router.put("/{course_id}/reorder-chapters")
async def reorder_chapters(
    course_id: int,
    data: ReorderRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    chapters = CourseService.reorder_chapters(db, current_user, course_id, data.chapter_ids)
    return {
        "message": "Chapters reordered successfully",
        "chapter_ids": [chapter.id for chapter in chapters],
    }


@router.post("/{course_id}/chapters/{chapter_id}/quiz", response_model=ChapterResponse)
async def set_chapter_quiz(
    course_id: int,
    chapter_id: int,
    data: QuizDefinition,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: CloudinaryStorage = Depends(get_media_storage),
):
    """Attach or replace the quiz of a chapter"""
    chapter = CourseService.get_owned_chapter(db, current_user, course_id, chapter_id)
    previous_kind, previous_public_id = chapter.content_type, chapter.media_public_id
    chapter = CourseService.set_chapter_quiz(db, current_user, course_id, chapter_id, data)
    await _discard_media(storage, previous_kind, previous_public_id)
    return chapter


@router.post("/{course_id}/chapters/{chapter_id}/quiz/submit", response_model=QuizResult)
async def submit_quiz(
    course_id: int,
    chapter_id: int,
    data: QuizSubmission,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return CourseService.submit_quiz(db, current_user, course_id, chapter_id, data.answers)


@router.post("/{course_id}/chapters/{chapter_id}/complete", response_model=ProgressResponse)
async def mark_chapter_complete(
    course_id: int,
    chapter_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return EnrollmentService.mark_chapter_complete(db, current_user, course_id, chapter_id)


@router.post("/{course_id}/rate", response_model=RatingResponse)
async def rate_course(
    course_id: int,
    data: RateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return RatingService.rate(db, current_user, course_id, data.rating)
