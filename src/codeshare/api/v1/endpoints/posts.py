# src/codeshare/api/v1/endpoints/posts.py
"""Post, comment and like endpoints.

Engine calls block on the snapshot store, so they run in worker threads.
"""

import asyncio
from urllib.parse import quote

from fastapi import APIRouter, status
from fastapi.responses import PlainTextResponse

from codeshare.api.v1.dependencies import AdminDep, EngineDep, VisitorDep
from codeshare.schemas import (
    ClearAllResponse,
    CommentCreate,
    CommentPublic,
    CommentResponse,
    LikeResponse,
    MessageResponse,
    PostCreate,
    PostDetail,
    PostResponse,
    PostSummary,
    PostUpdate,
)

router = APIRouter(prefix="/posts", tags=["posts"])


def _content_disposition(filename: str) -> str:
    """Build an attachment header that survives non-ASCII titles."""
    ascii_name = filename.encode("ascii", "replace").decode("ascii").replace('"', "_")
    if ascii_name == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


@router.get("", response_model=list[PostSummary])
async def list_posts(engine: EngineDep) -> list[PostSummary]:
    """List every post with view, like and comment counts, newest first."""
    return await asyncio.to_thread(engine.list_posts)


@router.get("/{post_id}", response_model=PostDetail)
async def get_post(post_id: int, engine: EngineDep, visitor_id: VisitorDep) -> PostDetail:
    """Get one post with comments; records the caller as a viewer.

    Raises:
        NotFound: If the post does not exist.
    """
    return await asyncio.to_thread(engine.get_post, post_id, visitor_id)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(payload: PostCreate, engine: EngineDep, _admin: AdminDep) -> PostResponse:
    """Publish a new post (admin only)."""
    post = await asyncio.to_thread(engine.create_post, payload)
    return PostResponse(message="Post created", post=post)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    payload: PostUpdate,
    engine: EngineDep,
    _admin: AdminDep,
) -> PostResponse:
    """Update the supplied fields of a post (admin only)."""
    post = await asyncio.to_thread(engine.update_post, post_id, payload)
    return PostResponse(message="Post updated", post=post)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(post_id: int, engine: EngineDep, _admin: AdminDep) -> MessageResponse:
    """Delete a post and all of its engagement data (admin only)."""
    await asyncio.to_thread(engine.delete_post, post_id)
    return MessageResponse(message="Post deleted")


@router.delete("", response_model=ClearAllResponse)
async def clear_posts(engine: EngineDep, _admin: AdminDep) -> ClearAllResponse:
    """Delete every post and reset the id counters (admin only)."""
    removed = await asyncio.to_thread(engine.clear_all)
    return ClearAllResponse(message=f"All {removed} post(s) deleted", removed=removed)


@router.post("/{post_id}/comments", response_model=CommentResponse)
async def add_comment(
    post_id: int,
    payload: CommentCreate,
    engine: EngineDep,
    visitor_id: VisitorDep,
) -> CommentResponse:
    """Add a visitor comment to a post."""
    comment = await asyncio.to_thread(
        engine.add_comment, post_id, payload.author, payload.text, visitor_id
    )
    return CommentResponse(comment=comment)


@router.get("/{post_id}/comments", response_model=list[CommentPublic])
async def list_comments(post_id: int, engine: EngineDep) -> list[CommentPublic]:
    """List a post's comments, newest first."""
    return await asyncio.to_thread(engine.list_comments, post_id)


@router.post("/{post_id}/like", response_model=LikeResponse)
async def toggle_like(post_id: int, engine: EngineDep, visitor_id: VisitorDep) -> LikeResponse:
    """Like a post, or remove the caller's like if present."""
    result = await asyncio.to_thread(engine.toggle_like, post_id, visitor_id)
    return LikeResponse(liked=result.liked, likes=result.likes)


@router.get("/{post_id}/download", response_class=PlainTextResponse)
async def download_post(post_id: int, engine: EngineDep) -> PlainTextResponse:
    """Download the raw code body as a file."""
    download = await asyncio.to_thread(engine.download, post_id)
    return PlainTextResponse(
        download.content,
        headers={"Content-Disposition": _content_disposition(download.filename)},
    )
