"""Business rules of the board.

Every mutating operation follows the same cycle: load the snapshot, apply the
change in memory, save the snapshot, and only then publish exactly one event.
A save that hits a concurrent writer is retried from a fresh load; a save
that fails outright surfaces as :class:`PersistenceFailed` and nothing is
published.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Generic, TypeVar

from codeshare.core.errors import NotFound, PersistenceFailed, SnapshotConflict, ValidationFailed
from codeshare.core.settings import settings
from codeshare.db.time import utcnow
from codeshare.schemas import (
    BoardStats,
    Comment,
    CommentPublic,
    ExportBundle,
    LikeResult,
    Post,
    PostCreate,
    PostDefaults,
    PostDetail,
    PostSummary,
    PostUpdate,
    Snapshot,
    normalize_tags,
)
from codeshare.services import events
from codeshare.services.events import BoardEvent, EventPublisher, NullPublisher
from codeshare.services.store import SnapshotStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

RECENT_POSTS_LIMIT = 5

LANGUAGE_EXTENSIONS: dict[str, str] = {
    "javascript": "js",
    "python": "py",
    "java": "java",
    "php": "php",
    "html": "html",
    "cpp": "cpp",
    "csharp": "cs",
}
DEFAULT_EXTENSION = "txt"


@dataclass
class Outcome(Generic[T]):
    """Result of an in-memory mutation.

    ``changed`` is False when the snapshot was left untouched and does not need
    to be saved.
    """

    result: T
    event: BoardEvent | None = None
    changed: bool = True


@dataclass(frozen=True)
class CodeDownload:
    """Raw code body and the filename it should be saved under."""

    filename: str
    content: str


def download_filename(title: str, language: str) -> str:
    """Build ``<title with underscores>.<extension>`` for a post."""
    extension = LANGUAGE_EXTENSIONS.get(language, DEFAULT_EXTENSION)
    stem = re.sub(r"\s+", "_", title)
    return f"{stem}.{extension}"


def _clean(value: str | None) -> str:
    return value.strip() if value else ""


def _newest_first(comments: list[Comment]) -> list[CommentPublic]:
    ordered = sorted(comments, key=lambda comment: (comment.created_at, comment.id), reverse=True)
    return [comment.to_public() for comment in ordered]


def _by_recency(posts: list[Post]) -> list[Post]:
    return sorted(posts, key=lambda post: (post.created_at, post.id), reverse=True)


class EngagementEngine:
    """Post, comment, view and like rules over a :class:`SnapshotStore`."""

    def __init__(
        self,
        store: SnapshotStore,
        publisher: EventPublisher | None = None,
        *,
        conflict_retries: int | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.publisher = publisher or NullPublisher()
        self.conflict_retries = (
            settings.store_conflict_retries if conflict_retries is None else conflict_retries
        )
        self._clock = clock

    # --- mutation cycle ------------------------------------------------------

    def _mutate(self, apply: Callable[[Snapshot], Outcome[T]]) -> T:
        for attempt in range(self.conflict_retries + 1):
            snapshot = self.store.load()
            outcome = apply(snapshot)
            if not outcome.changed:
                return outcome.result
            try:
                self.store.save(snapshot)
            except SnapshotConflict:
                logger.warning(
                    "Snapshot changed during update (attempt %d/%d), retrying",
                    attempt + 1,
                    self.conflict_retries + 1,
                )
                continue
            if outcome.event is not None:
                self.publisher.publish(outcome.event)
            return outcome.result
        logger.error("Giving up after %d conflicting saves", self.conflict_retries + 1)
        raise PersistenceFailed(SnapshotConflict.detail)

    @staticmethod
    def _require_post(snapshot: Snapshot, post_id: int) -> Post:
        post = snapshot.find_post(post_id)
        if post is None:
            raise NotFound()
        return post

    # --- reads ---------------------------------------------------------------

    def list_posts(self) -> list[PostSummary]:
        """Return every post with derived counts, newest first."""
        snapshot = self.store.load()
        summaries = [
            PostSummary(
                **post.model_dump(),
                views=len(snapshot.views.get(post.id, [])),
                likes=len(snapshot.likes.get(post.id, [])),
                comments_count=len(snapshot.comments.get(post.id, [])),
            )
            for post in snapshot.posts
        ]
        return sorted(summaries, key=lambda summary: (summary.created_at, summary.id), reverse=True)

    def get_post(self, post_id: int, visitor_id: str) -> PostDetail:
        """Return one post and record ``visitor_id`` as a viewer."""

        def apply(snapshot: Snapshot) -> Outcome[PostDetail]:
            post = self._require_post(snapshot, post_id)
            viewers = snapshot.views.setdefault(post_id, [])
            changed = visitor_id not in viewers
            if changed:
                viewers.append(visitor_id)
            likers = snapshot.likes.get(post_id, [])
            detail = PostDetail(
                **post.model_dump(),
                views=len(viewers),
                likes=len(likers),
                comments=_newest_first(snapshot.comments.get(post_id, [])),
                viewer_has_liked=visitor_id in likers,
            )
            return Outcome(detail, changed=changed)

        return self._mutate(apply)

    def list_comments(self, post_id: int) -> list[CommentPublic]:
        snapshot = self.store.load()
        self._require_post(snapshot, post_id)
        return _newest_first(snapshot.comments.get(post_id, []))

    def download(self, post_id: int) -> CodeDownload:
        snapshot = self.store.load()
        post = self._require_post(snapshot, post_id)
        return CodeDownload(download_filename(post.title, post.language), post.code)

    def get_stats(self) -> BoardStats:
        """Aggregate totals, posts per language and the latest posts."""
        snapshot = self.store.load()
        totals = snapshot.totals()
        return BoardStats(
            **totals.model_dump(),
            languages=dict(Counter(post.language for post in snapshot.posts)),
            recent_posts=_by_recency(snapshot.posts)[:RECENT_POSTS_LIMIT],
        )

    def export_all(self) -> ExportBundle:
        snapshot = self.store.load()
        return ExportBundle(
            **snapshot.totals().model_dump(),
            posts=snapshot.posts,
            comments=snapshot.comments,
            likes=snapshot.likes,
            views=snapshot.views,
            exported_at=self._clock(),
        )

    # --- admin mutations -----------------------------------------------------

    def create_post(self, data: PostCreate) -> Post:
        title, code, author = _clean(data.title), _clean(data.code), _clean(data.author)
        if not (title and code and author):
            raise ValidationFailed("Title, code and author are required")

        def apply(snapshot: Snapshot) -> Outcome[Post]:
            now = self._clock()
            snapshot.last_post_id += 1
            post = Post(
                id=snapshot.last_post_id,
                title=title,
                description=_clean(data.description) or PostDefaults.DESCRIPTION,
                author=author,
                language=_clean(data.language) or PostDefaults.LANGUAGE,
                tags=normalize_tags(data.tags) or list(PostDefaults.TAGS),
                code=code,
                created_at=now,
                updated_at=now,
            )
            snapshot.posts.append(post)
            return Outcome(post, events.new_post(post))

        post = self._mutate(apply)
        logger.info("Created post %s", post.id)
        return post

    def update_post(self, post_id: int, data: PostUpdate) -> Post:
        """Replace only the supplied fields and advance ``updated_at``."""

        def apply(snapshot: Snapshot) -> Outcome[Post]:
            post = self._require_post(snapshot, post_id)
            changes: dict[str, object] = {}
            for field in ("title", "description", "author", "language", "code"):
                value = _clean(getattr(data, field))
                if value:
                    changes[field] = value
            tags = normalize_tags(data.tags)
            if tags:
                changes["tags"] = tags
            changes["updated_at"] = max(self._clock(), post.updated_at)
            updated = post.model_copy(update=changes)
            index = snapshot.posts.index(post)
            snapshot.posts[index] = updated
            return Outcome(updated, events.update_post(updated))

        post = self._mutate(apply)
        logger.info("Updated post %s", post_id)
        return post

    def delete_post(self, post_id: int) -> bool:
        """Remove a post together with its comments, likes and views."""

        def apply(snapshot: Snapshot) -> Outcome[bool]:
            post = self._require_post(snapshot, post_id)
            snapshot.posts.remove(post)
            snapshot.comments.pop(post_id, None)
            snapshot.likes.pop(post_id, None)
            snapshot.views.pop(post_id, None)
            return Outcome(True, events.delete_post(post_id))

        deleted = self._mutate(apply)
        logger.info("Deleted post %s", post_id)
        return deleted

    def clear_all(self) -> int:
        """Empty the board and reset both id counters; return removed post count."""

        def apply(snapshot: Snapshot) -> Outcome[int]:
            removed = len(snapshot.posts)
            snapshot.reset()
            return Outcome(removed, events.clear_all_posts())

        removed = self._mutate(apply)
        logger.info("Cleared %d post(s)", removed)
        return removed

    # --- visitor mutations ---------------------------------------------------

    def add_comment(
        self,
        post_id: int,
        author: str | None,
        text: str | None,
        visitor_id: str,
    ) -> CommentPublic:
        author, text = _clean(author), _clean(text)
        if not (author and text):
            raise ValidationFailed("Name and comment text are required")

        def apply(snapshot: Snapshot) -> Outcome[CommentPublic]:
            self._require_post(snapshot, post_id)
            snapshot.last_comment_id += 1
            comment = Comment(
                id=snapshot.last_comment_id,
                post_id=post_id,
                author=author,
                text=text,
                visitor_id=visitor_id,
                created_at=self._clock(),
            )
            snapshot.comments.setdefault(post_id, []).insert(0, comment)
            public = comment.to_public()
            return Outcome(public, events.new_comment(post_id, public))

        return self._mutate(apply)

    def toggle_like(self, post_id: int, visitor_id: str) -> LikeResult:
        """Like the post for ``visitor_id``, or unlike it if already liked."""

        def apply(snapshot: Snapshot) -> Outcome[LikeResult]:
            self._require_post(snapshot, post_id)
            likers = snapshot.likes.setdefault(post_id, [])
            if visitor_id in likers:
                likers.remove(visitor_id)
                liked = False
            else:
                likers.append(visitor_id)
                liked = True
            result = LikeResult(liked=liked, likes=len(likers))
            return Outcome(result, events.update_likes(post_id, result.likes, liked))

        return self._mutate(apply)
