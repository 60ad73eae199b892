"""
Course, chapter and quiz schemas for SkillVerse
"""

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from skillverse.schemas.users import PayoutDetails

QUIZ_OPTION_COUNT = 4


class QuizQuestion(BaseModel):
    """Multiple choice question with exactly four options"""
    question: str = Field(..., min_length=1)
    options: List[str]
    correct_index: int = Field(..., ge=0, le=QUIZ_OPTION_COUNT - 1)

    @field_validator("question")
    @classmethod
    def question_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Question text is required")
        return value.strip()

    @field_validator("options")
    @classmethod
    def exactly_four_options(cls, value: List[str]) -> List[str]:
        if len(value) != QUIZ_OPTION_COUNT:
            raise ValueError(f"Each question must have exactly {QUIZ_OPTION_COUNT} options")
        return value


class QuizDefinition(BaseModel):
    title: str = Field(..., min_length=1)
    questions: List[QuizQuestion] = Field(..., min_length=1)


class VideoContent(BaseModel):
    kind: Literal["video"] = "video"
    url: str
    public_id: Optional[str] = None


class PdfContent(BaseModel):
    kind: Literal["pdf"] = "pdf"
    url: str
    public_id: Optional[str] = None


class QuizContent(BaseModel):
    kind: Literal["quiz"] = "quiz"
    title: str
    questions: List[QuizQuestion]


ChapterContent = Annotated[
    Union[VideoContent, PdfContent, QuizContent], Field(discriminator="kind")
]


class ChapterResponse(BaseModel):
    id: int
    course_id: int
    position: int
    title: str
    description: Optional[str] = ""
    content: ChapterContent
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ChapterOutline(BaseModel):
    """Chapter listing without the gated content"""
    id: int
    position: int
    title: str
    description: Optional[str] = ""
    kind: str


class CourseCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: Optional[str] = None
    level: Optional[str] = None
    is_paid: bool = False
    price: float = Field(default=0.0, ge=0)
    payout_details: Optional[PayoutDetails] = None


class CourseUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    level: Optional[str] = None
    is_paid: Optional[bool] = None
    price: Optional[float] = Field(default=None, ge=0)
    payout_details: Optional[PayoutDetails] = None


class CourseResponse(BaseModel):
    id: int
    title: str
    description: str
    category: Optional[str] = None
    level: Optional[str] = None
    is_paid: bool
    price: float
    creator_id: int
    creator_name: str
    average_rating: float
    rating_count: int
    chapter_count: int
    created_at: Optional[datetime] = None
    is_enrolled: bool = False
    is_creator: bool = False

    model_config = ConfigDict(from_attributes=True)


class CourseDetailResponse(CourseResponse):
    chapters: List[ChapterOutline] = []


class CourseListResponse(BaseModel):
    courses: List[CourseResponse]


class CourseContentResponse(BaseModel):
    course_id: int
    title: str
    chapters: List[ChapterResponse]
    completed_chapters: List[int]
    progress: int


class EnrollRequest(BaseModel):
    course_id: int


class ProgressResponse(BaseModel):
    message: str
    course_id: int
    completed_chapters: List[int]
    total_chapters: int
    progress: int


class RateRequest(BaseModel):
    rating: int


class RatingResponse(BaseModel):
    message: str
    average_rating: float
    rating_count: int


class ReorderRequest(BaseModel):
    chapter_ids: List[int]


class QuizSubmission(BaseModel):
    answers: List[int]


class QuizResult(BaseModel):
    chapter_id: int
    correct: int
    total: int
    score: float
