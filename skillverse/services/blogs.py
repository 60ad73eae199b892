"""
Blog service for SkillVerse
Posting, listing and up/down voting
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from skillverse.core.exceptions import AuthorizationException, NotFoundException, ValidationException
from skillverse.core.logging import LoggerFactory
from skillverse.models import Blog, BlogVote, User, VoteDirection
from skillverse.schemas.blogs import BlogCreate

logger = logging.getLogger(__name__)
audit_logger = LoggerFactory.get_audit_logger()

VOTE_ALIASES = {
    "up": VoteDirection.UP,
    "upvote": VoteDirection.UP,
    "down": VoteDirection.DOWN,
    "downvote": VoteDirection.DOWN,
}

COUNTERS = {
    VoteDirection.UP: Blog.upvotes,
    VoteDirection.DOWN: Blog.downvotes,
}


class BlogService:
    @staticmethod
    def parse_direction(value: str) -> VoteDirection:
        direction = VOTE_ALIASES.get((value or "").strip().lower())
        if direction is None:
            raise ValidationException("Invalid vote type.", details={"allowed": list(VOTE_ALIASES)})
        return direction

    @staticmethod
    def get_blog_or_404(db: Session, blog_id: int) -> Blog:
        blog = db.get(Blog, blog_id)
        if blog is None:
            raise NotFoundException("Blog")
        return blog

    @staticmethod
    def list_blogs(db: Session) -> List[Blog]:
        """All blogs, newest first"""
        return db.query(Blog).order_by(Blog.created_at.desc(), Blog.id.desc()).all()

    @staticmethod
    def list_by_author(db: Session, author_id: int) -> List[Blog]:
        return (
            db.query(Blog)
            .filter(Blog.author_id == author_id)
            .order_by(Blog.created_at.desc(), Blog.id.desc())
            .all()
        )

    @staticmethod
    def create_blog(db: Session, user: User, data: BlogCreate) -> Blog:
        blog = Blog(
            title=data.title.strip(),
            tag=data.tag,
            content=data.content,
            author=user.name,
            author_id=user.id,
        )
        db.add(blog)
        db.commit()
        db.refresh(blog)

        logger.info(f"Blog {blog.id} created by user {user.id}")
        return blog

    @staticmethod
    def delete_blog(db: Session, user: User, blog_id: int, is_admin: bool = False) -> None:
        blog = BlogService.get_blog_or_404(db, blog_id)
        if blog.author_id != user.id and not is_admin:
            raise AuthorizationException("Unauthorized to delete this blog.")

        as_admin = blog.author_id != user.id
        db.delete(blog)
        db.commit()

        audit_logger.info(
            "Blog deleted",
            extra={"blog_id": blog_id, "deleted_by": user.id, "as_admin": as_admin},
        )

    @staticmethod
    def get_vote(db: Session, blog_id: int, user_id: int) -> Optional[BlogVote]:
        return (
            db.query(BlogVote)
            .filter(BlogVote.blog_id == blog_id, BlogVote.user_id == user_id)
            .first()
        )

    @staticmethod
    def vote(db: Session, user: User, blog_id: int, vote_type: str) -> dict:
        """
        Cast, repeat or flip the caller's vote on a blog

        The vote row and both counters change in one transaction. A flip only
        moves the counters when the conditional update of the vote row
        actually matched the previous direction.
        """
        direction = BlogService.parse_direction(vote_type)
        blog = BlogService.get_blog_or_404(db, blog_id)

        existing = BlogService.get_vote(db, blog.id, user.id)

        if existing is not None and existing.direction == direction:
            return {
                "message": f"Already {direction.value}voted.",
                "upvotes": blog.upvotes,
                "downvotes": blog.downvotes,
                "vote": direction.value,
            }

        try:
            if existing is None:
                db.add(BlogVote(blog_id=blog.id, user_id=user.id, direction=direction))
                db.flush()
                counter = COUNTERS[direction]
                db.query(Blog).filter(Blog.id == blog.id).update(
                    {counter: counter + 1}, synchronize_session=False
                )
            else:
                previous = existing.direction
                moved = (
                    db.query(BlogVote)
                    .filter(BlogVote.id == existing.id, BlogVote.direction == previous)
                    .update({BlogVote.direction: direction}, synchronize_session=False)
                )
                if moved == 1:
                    old_counter, new_counter = COUNTERS[previous], COUNTERS[direction]
                    db.query(Blog).filter(Blog.id == blog.id).update(
                        {old_counter: old_counter - 1, new_counter: new_counter + 1},
                        synchronize_session=False,
                    )
            db.commit()
        except IntegrityError:
            # A concurrent first vote by the same user won the insert; retry as a flip
            db.rollback()
            return BlogService.vote(db, user, blog_id, vote_type)

        db.refresh(blog)
        return {
            "message": "Vote updated successfully.",
            "upvotes": blog.upvotes,
            "downvotes": blog.downvotes,
            "vote": direction.value,
        }
