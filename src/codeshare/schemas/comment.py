"""Comment-related Pydantic schemas."""

from datetime import datetime

from pydantic import Field

from .common import CamelModel


class CommentCreate(CamelModel):
    """Schema for a visitor submitting a comment.

    Fields are optional here so blank or missing values surface as a 400 from
    the engine instead of a schema error.
    """

    author: str | None = Field(None, description="Display name of the commenter")
    text: str | None = Field(None, description="Comment body")


class CommentPublic(CamelModel):
    """Comment as shown to visitors."""

    id: int
    post_id: int
    author: str
    text: str
    created_at: datetime


class Comment(CommentPublic):
    """Stored comment, including the visitor that wrote it."""

    visitor_id: str

    def to_public(self) -> CommentPublic:
        return CommentPublic.model_validate(self.model_dump(exclude={"visitor_id"}))


class CommentResponse(CamelModel):
    """Envelope returned after a comment is added."""

    success: bool = True
    message: str = "Comment added"
    comment: CommentPublic
