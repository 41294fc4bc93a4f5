"""Admin authentication schemas."""

from .common import CamelModel


class LoginRequest(CamelModel):
    """Admin login body."""

    password: str | None = None


class LoginResponse(CamelModel):
    """Issued admin token."""

    success: bool = True
    token: str
    message: str = "Login successful"
