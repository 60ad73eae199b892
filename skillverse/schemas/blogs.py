"""Blog schemas"""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BlogCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    tag: str = Field(..., min_length=1, max_length=50)
    content: str = Field(..., min_length=1)

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Field cannot be blank")
        return value

    @field_validator("tag")
    @classmethod
    def normalize_tag(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("Tag cannot be blank")
        return value


class BlogResponse(BaseModel):
    id: int
    title: str
    author: str
    author_id: int
    tag: str
    content: str
    upvotes: int
    downvotes: int
    vote_map: Dict[str, str] = {}
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class VoteResponse(BaseModel):
    message: str
    upvotes: int
    downvotes: int
    vote: str
