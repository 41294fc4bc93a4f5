"""The persisted board document."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from .comment import Comment
from .common import CamelModel
from .engagement import BoardTotals
from .post import Post


class Snapshot(CamelModel):
    """Entire board state, loaded and saved as one unit.

    ``comments``, ``likes`` and ``views`` are keyed by post id. Comment lists
    are kept newest-inserted first; like and view lists hold each visitor id at
    most once.
    """

    posts: list[Post] = Field(default_factory=list)
    comments: dict[int, list[Comment]] = Field(default_factory=dict)
    likes: dict[int, list[str]] = Field(default_factory=dict)
    views: dict[int, list[str]] = Field(default_factory=dict)
    last_post_id: int = 0
    last_comment_id: int = 0
    version: int = 0

    @classmethod
    def from_document(cls, document: dict[str, Any], version: int | None = None) -> Snapshot:
        """Build a snapshot from its stored JSON document."""
        snapshot = cls.model_validate(document)
        if version is not None:
            snapshot.version = version
        return snapshot

    def to_document(self) -> dict[str, Any]:
        """Return the JSON document written by the store."""
        return self.to_payload()

    def find_post(self, post_id: int) -> Post | None:
        return next((post for post in self.posts if post.id == post_id), None)

    def totals(self) -> BoardTotals:
        """Count posts and engagement entries across the board."""
        return BoardTotals(
            total_posts=len(self.posts),
            total_comments=sum(len(items) for items in self.comments.values()),
            total_likes=sum(len(items) for items in self.likes.values()),
            total_views=sum(len(items) for items in self.views.values()),
        )

    def reset(self) -> None:
        """Drop every post and all engagement data, keeping the version."""
        self.posts = []
        self.comments = {}
        self.likes = {}
        self.views = {}
        self.last_post_id = 0
        self.last_comment_id = 0
