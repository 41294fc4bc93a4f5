"""Schemas for likes, statistics and export bundles."""

from datetime import datetime

from pydantic import Field

from .comment import Comment
from .common import CamelModel
from .post import Post


class LikeResult(CamelModel):
    """Outcome of a like toggle."""

    liked: bool
    likes: int


class LikeResponse(LikeResult):
    """Envelope returned by the like endpoint."""

    success: bool = True


class ClearAllResponse(CamelModel):
    """Envelope returned after every post has been removed."""

    success: bool = True
    message: str
    removed: int


class BoardTotals(CamelModel):
    """Aggregate counters across the whole board."""

    total_posts: int = 0
    total_comments: int = 0
    total_likes: int = 0
    total_views: int = 0


class BoardStats(BoardTotals):
    """Totals plus language histogram and the most recent posts."""

    languages: dict[str, int] = Field(default_factory=dict)
    recent_posts: list[Post] = Field(default_factory=list)


class ExportBundle(BoardTotals):
    """Full board contents for download."""

    posts: list[Post] = Field(default_factory=list)
    comments: dict[int, list[Comment]] = Field(default_factory=dict)
    likes: dict[int, list[str]] = Field(default_factory=dict)
    views: dict[int, list[str]] = Field(default_factory=dict)
    exported_at: datetime
