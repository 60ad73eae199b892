"""
Blog endpoints
"""

from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from skillverse.api.deps import get_admin_policy
from skillverse.core.database import get_db
from skillverse.core.security import get_current_user
from skillverse.models import User
from skillverse.schemas.blogs import BlogCreate, BlogResponse, VoteResponse
from skillverse.services.admin import AdminPolicy
from skillverse.services.blogs import BlogService

router = APIRouter()


@router.get("/", response_model=List[BlogResponse])
async def list_blogs(db: Session = Depends(get_db)):
    """All blogs, newest first"""
    return BlogService.list_blogs(db)


@router.post("/", response_model=BlogResponse, status_code=status.HTTP_201_CREATED)
async def create_blog(
    data: BlogCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return BlogService.create_blog(db, current_user, data)


@router.get("/{blog_id}", response_model=BlogResponse)
async def get_blog(blog_id: int, db: Session = Depends(get_db)):
    return BlogService.get_blog_or_404(db, blog_id)


@router.delete("/{blog_id}")
async def delete_blog(
    blog_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    admin_policy: AdminPolicy = Depends(get_admin_policy),
):
    """Delete a blog (author or administrator)"""
    BlogService.delete_blog(db, current_user, blog_id, is_admin=admin_policy.is_admin(current_user))
    return {"message": "Blog deleted successfully."}


@router.patch("/{blog_id}/vote", response_model=VoteResponse)
async def vote_blog(
    blog_id: int,
    type: str = Query(..., description="up, down, upvote or downvote"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return BlogService.vote(db, current_user, blog_id, type)
