# src/codeshare/api/v1/endpoints/system.py
"""Board-wide statistics, export and admin uploads."""

from __future__ import annotations

import asyncio
import json
import logging
import secrets
from pathlib import Path

from fastapi import APIRouter, HTTPException, UploadFile, status
from fastapi.responses import Response

from codeshare.api.v1.dependencies import AdminDep, EngineDep
from codeshare.core.errors import ValidationFailed
from codeshare.core.settings import settings
from codeshare.db.time import utcnow
from codeshare.schemas import BoardStats, UploadedFile, UploadResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])

EXPORT_FILENAME = "codeshare-export.json"
_UPLOAD_CHUNK_SIZE = 64 * 1024


@router.get("/stats", response_model=BoardStats)
async def get_stats(engine: EngineDep) -> BoardStats:
    """Return board totals, posts per language and the latest posts."""
    return await asyncio.to_thread(engine.get_stats)


@router.get("/export")
async def export_board(engine: EngineDep, _admin: AdminDep) -> Response:
    """Download every post and all engagement data as JSON (admin only)."""
    bundle = await asyncio.to_thread(engine.export_all)
    return Response(
        content=json.dumps(bundle.to_payload(), indent=2),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


@router.post("/upload", response_model=UploadResponse)
async def upload_file(file: UploadFile, _admin: AdminDep) -> UploadResponse:
    """Store an uploaded file under the upload directory (admin only).

    Raises:
        ValidationFailed: If the upload is empty or unnamed.
        HTTPException: 413 if the file exceeds the configured size limit.
    """
    if not file.filename:
        raise ValidationFailed("No file uploaded")

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    stored_name = secrets.token_hex(16)
    target = upload_dir / stored_name

    size = 0
    with target.open("wb") as handle:
        while chunk := await file.read(_UPLOAD_CHUNK_SIZE):
            size += len(chunk)
            if size > settings.upload_max_bytes:
                handle.close()
                target.unlink(missing_ok=True)
                raise HTTPException(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    detail="File is too large",
                )
            await asyncio.to_thread(handle.write, chunk)

    logger.info("Stored upload %s as %s (%d bytes)", file.filename, stored_name, size)
    return UploadResponse(
        file=UploadedFile(
            originalname=file.filename,
            filename=stored_name,
            path=f"/uploads/{stored_name}",
            size=size,
            mimetype=file.content_type,
            uploaded_at=utcnow(),
        )
    )
