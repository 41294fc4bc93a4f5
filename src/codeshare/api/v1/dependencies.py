"""Shared API dependencies for authentication, identity and services."""

from typing import Annotated, Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.requests import HTTPConnection

from codeshare.core.security import decode_admin_token
from codeshare.core.settings import settings
from codeshare.services.broadcaster import Broadcaster, get_broadcaster
from codeshare.services.engine import EngagementEngine
from codeshare.services.events import EventPublisher, NullPublisher
from codeshare.services.identity import NetworkAddressIdentity, VisitorIdentity
from codeshare.services.store import SnapshotStore, get_store

# auto_error is off so a missing header is reported as 401 by the admin guard.
bearer_scheme = HTTPBearer(auto_error=False)

StoreDep = Annotated[SnapshotStore, Depends(get_store)]
BroadcasterDep = Annotated[Broadcaster, Depends(get_broadcaster)]


def get_publisher(broadcaster: BroadcasterDep) -> EventPublisher:
    """Return the realtime broadcaster, or a no-op when realtime is disabled."""
    if not settings.realtime_enabled:
        return NullPublisher()
    return broadcaster


def get_engine(
    store: StoreDep,
    publisher: Annotated[EventPublisher, Depends(get_publisher)],
) -> EngagementEngine:
    """Build the engagement engine for one request."""
    return EngagementEngine(store, publisher)


def get_visitor_identity() -> VisitorIdentity:
    """Return the visitor identity scheme in use."""
    return NetworkAddressIdentity(trust_forwarded_for=settings.trust_forwarded_for)


def get_visitor_id(
    connection: HTTPConnection,
    identity: Annotated[VisitorIdentity, Depends(get_visitor_identity)],
) -> str:
    """Resolve the caller's visitor id."""
    return identity.resolve(connection)


def require_admin(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> dict[str, Any]:
    """Require a valid admin bearer token.

    Raises:
        Unauthenticated: If the token is missing or invalid.
        Forbidden: If the token does not carry the admin role.
    """
    token = credentials.credentials if credentials is not None else None
    return decode_admin_token(token)


EngineDep = Annotated[EngagementEngine, Depends(get_engine)]
VisitorDep = Annotated[str, Depends(get_visitor_id)]
AdminDep = Annotated[dict[str, Any], Depends(require_admin)]
