"""Error taxonomy shared by the services and the HTTP layer."""

from __future__ import annotations

from fastapi import status


class BoardError(Exception):
    """Base class for failures reported to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class ValidationFailed(BoardError):
    """Required input was missing or empty."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid request"


class NotFound(BoardError):
    """The referenced post does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Post not found"


class Unauthenticated(BoardError):
    """Credential missing, malformed, expired or wrongly signed."""

    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Could not validate credentials"


class Forbidden(BoardError):
    """Credential is valid but does not carry the admin role."""

    status_code = status.HTTP_403_FORBIDDEN
    detail = "Access denied"


class PersistenceFailed(BoardError):
    """The store could not load or durably save the snapshot.

    The operation did not take effect and may be retried.
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "Storage unavailable, the operation did not take effect"


class SnapshotConflict(PersistenceFailed):
    """The stored snapshot changed between load and save."""

    detail = "Concurrent modification, the operation did not take effect"
