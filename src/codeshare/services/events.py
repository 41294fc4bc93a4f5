"""Board events published after a mutation has been saved."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from codeshare.schemas import CommentPublic, Post

NEW_POST = "newPost"
UPDATE_POST = "updatePost"
DELETE_POST = "deletePost"
NEW_COMMENT = "newComment"
UPDATE_LIKES = "updateLikes"
CLEAR_ALL_POSTS = "clearAllPosts"


@dataclass(frozen=True)
class BoardEvent:
    """A named payload, optionally scoped to the room of one post."""

    name: str
    payload: Any = None
    room: int | None = field(default=None)


class EventPublisher(Protocol):
    """Sink for board events."""

    def publish(self, event: BoardEvent) -> None:
        ...


class NullPublisher:
    """Publisher used when the realtime channel is disabled."""

    def publish(self, event: BoardEvent) -> None:
        return None


def new_post(post: Post) -> BoardEvent:
    return BoardEvent(NEW_POST, post.to_payload())


def update_post(post: Post) -> BoardEvent:
    return BoardEvent(UPDATE_POST, post.to_payload())


def delete_post(post_id: int) -> BoardEvent:
    return BoardEvent(DELETE_POST, post_id)


def new_comment(post_id: int, comment: CommentPublic) -> BoardEvent:
    return BoardEvent(
        NEW_COMMENT,
        {"postId": post_id, "comment": comment.to_payload()},
        room=post_id,
    )


def update_likes(post_id: int, likes: int, liked: bool) -> BoardEvent:
    return BoardEvent(UPDATE_LIKES, {"postId": post_id, "likes": likes, "liked": liked})


def clear_all_posts() -> BoardEvent:
    return BoardEvent(CLEAR_ALL_POSTS)
