"""Post service: creating posts and reading feeds."""

import logging
from datetime import datetime

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from postboard.errors import StorageError, ValidationError
from postboard.models.post import MAX_CONTENT_LENGTH, Post
from postboard.models.user import User

logger = logging.getLogger(__name__)


class PostView(BaseModel):
    """A post as the client sees it, with its author's username."""

    id: int
    author_id: int
    content: str
    created_at: datetime
    username: str


def _feed_query():
    return (
        select(Post, User.username)
        .join(User, Post.author_id == User.id)
        .order_by(Post.created_at.desc(), Post.id.desc())
    )


def _to_view(post: Post, username: str) -> PostView:
    return PostView(
        id=post.id,
        author_id=post.author_id,
        content=post.content,
        created_at=post.created_at,
        username=username,
    )


def _fetch(session: Session, query) -> list[PostView]:
    try:
        rows = session.exec(query).all()
    except SQLAlchemyError:
        logger.exception("Failed to fetch posts")
        raise StorageError("Failed to fetch posts")
    return [_to_view(post, username) for post, username in rows]


def validate_content(content: str) -> None:
    if not content or len(content) > MAX_CONTENT_LENGTH:
        raise ValidationError(
            [
                {
                    "field": "content",
                    "message": "Post content must be between 1 and 280 characters",
                }
            ]
        )


def create_post(session: Session, author_id: int, content: str) -> PostView:
    """Persist a post for an already authenticated author.

    ``author_id`` must come from verified session claims, never from the
    request body.
    """
    validate_content(content)

    post = Post(author_id=author_id, content=content)
    try:
        session.add(post)
        session.commit()
        session.refresh(post)
        row = session.exec(
            _feed_query().where(Post.id == post.id)
        ).one()
    except SQLAlchemyError:
        session.rollback()
        logger.exception(f"Failed to create post for user {author_id}")
        raise StorageError("Failed to create post")

    logger.info(f"User {author_id} created post {post.id}")
    return _to_view(*row)


def list_all_posts(session: Session) -> list[PostView]:
    return _fetch(session, _feed_query())


def list_posts_by_user(session: Session, user_id: int) -> list[PostView]:
    return _fetch(session, _feed_query().where(Post.author_id == user_id))
