"""
Pydantic schemas for API request/response models and the stored document.

These schemas define the structure of API data for serialization and validation.
"""

from .auth import LoginRequest, LoginResponse
from .comment import Comment, CommentCreate, CommentPublic, CommentResponse
from .common import MessageResponse
from .engagement import (
    BoardStats,
    BoardTotals,
    ClearAllResponse,
    ExportBundle,
    LikeResponse,
    LikeResult,
)
from .post import (
    Post,
    PostCreate,
    PostDefaults,
    PostDetail,
    PostResponse,
    PostSummary,
    PostUpdate,
    normalize_tags,
)
from .snapshot import Snapshot
from .upload import UploadedFile, UploadResponse

__all__ = [
    "LoginRequest", "LoginResponse",
    "Comment", "CommentCreate", "CommentPublic", "CommentResponse",
    "MessageResponse",
    "BoardStats", "BoardTotals", "ClearAllResponse", "ExportBundle",
    "LikeResponse", "LikeResult",
    "Post", "PostCreate", "PostDefaults", "PostDetail", "PostResponse",
    "PostSummary", "PostUpdate", "normalize_tags",
    "Snapshot",
    "UploadedFile", "UploadResponse",
]
