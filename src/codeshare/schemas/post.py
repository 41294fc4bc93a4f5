"""Post-related Pydantic schemas and field defaults."""

from collections.abc import Iterable
from datetime import datetime
from typing import Final

from pydantic import Field

from .comment import CommentPublic
from .common import CamelModel


class PostDefaults:
    """Values applied when optional post fields are omitted or blank."""

    DESCRIPTION: Final[str] = "No description."
    LANGUAGE: Final[str] = "javascript"
    TAGS: Final[tuple[str, ...]] = ("code",)


def normalize_tags(raw: str | Iterable[str] | None) -> list[str]:
    """Split, trim and drop empty tags.

    Accepts either a comma-separated string or a sequence of strings and
    returns an empty list when nothing usable remains.
    """
    if raw is None:
        return []
    items = raw.split(",") if isinstance(raw, str) else raw
    return [tag.strip() for tag in items if tag and tag.strip()]


class PostCreate(CamelModel):
    """Schema for publishing a new post.

    Title, code and author are required; the engine enforces that so a blank
    value is reported as a validation failure rather than a schema error.
    """

    title: str | None = None
    description: str | None = None
    author: str | None = None
    language: str | None = None
    tags: list[str] | str | None = Field(
        None,
        description="List of tags or a comma-separated string",
    )
    code: str | None = None


class PostUpdate(PostCreate):
    """Partial update: omitted or blank fields keep their stored value."""


class Post(CamelModel):
    """A published code snippet."""

    id: int
    title: str
    description: str
    author: str
    language: str
    tags: list[str]
    code: str
    created_at: datetime
    updated_at: datetime


class PostSummary(Post):
    """Post as listed on the board, with derived engagement counts."""

    views: int = 0
    likes: int = 0
    comments_count: int = 0


class PostDetail(Post):
    """Single post with its comment stream and the caller's like state."""

    views: int = 0
    likes: int = 0
    comments: list[CommentPublic] = Field(default_factory=list)
    viewer_has_liked: bool = False


class PostResponse(CamelModel):
    """Envelope returned by create and update."""

    success: bool = True
    message: str
    post: Post
