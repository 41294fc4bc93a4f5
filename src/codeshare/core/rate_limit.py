"""Per-visitor request limiting for the ``/api`` routes."""

from __future__ import annotations

from slowapi import Limiter
from starlette.requests import Request

from codeshare.core.settings import settings
from codeshare.services.identity import NetworkAddressIdentity


def visitor_key(request: Request) -> str:
    """Bucket requests by the same visitor id used for views and likes."""
    identity = NetworkAddressIdentity(trust_forwarded_for=settings.trust_forwarded_for)
    return identity.resolve(request)


def _configured_limit() -> str:
    # Read on every request so the limit follows the live settings.
    return settings.rate_limit


limiter = Limiter(
    key_func=visitor_key,
    default_limits=[_configured_limit],
    enabled=settings.rate_limit_enabled,
    storage_uri=settings.rate_limit_storage_uri,
)


def exempt_outside_api(routes, prefix: str = "/api") -> None:
    """Exclude every route not under ``prefix`` from the default limit."""
    for route in routes:
        endpoint = getattr(route, "endpoint", None)
        path = getattr(route, "path", "")
        if endpoint is not None and not path.startswith(prefix):
            limiter.exempt(endpoint)
