from datetime import UTC, datetime

from sqlmodel import Field, SQLModel

MAX_CONTENT_LENGTH = 280


class Post(SQLModel, table=True):
    __tablename__ = "posts"

    id: int | None = Field(default=None, primary_key=True)
    author_id: int = Field(foreign_key="users.id", index=True)
    content: str = Field(max_length=MAX_CONTENT_LENGTH)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), index=True
    )
