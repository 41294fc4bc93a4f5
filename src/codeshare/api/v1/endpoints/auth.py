# src/codeshare/api/v1/endpoints/auth.py
"""Admin authentication endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from codeshare.core.errors import Unauthenticated, ValidationFailed
from codeshare.core.security import create_access_token, verify_admin_password
from codeshare.schemas import LoginRequest, LoginResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest) -> LoginResponse:
    """Exchange the shared admin password for a bearer token.

    Raises:
        ValidationFailed: If no password was supplied.
        Unauthenticated: If the password is wrong.
    """
    if not payload.password:
        raise ValidationFailed("Password is required")

    if not verify_admin_password(payload.password):
        logger.warning("Rejected admin login attempt")
        raise Unauthenticated("Wrong password")

    return LoginResponse(token=create_access_token())
