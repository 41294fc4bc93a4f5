"""Schemas for admin file uploads."""

from datetime import datetime

from .common import CamelModel


class UploadedFile(CamelModel):
    """Metadata of a file stored under the upload directory."""

    originalname: str
    filename: str
    path: str
    size: int
    mimetype: str | None = None
    uploaded_at: datetime


class UploadResponse(CamelModel):
    """Envelope returned by the upload endpoint."""

    success: bool = True
    message: str = "File uploaded"
    file: UploadedFile
