"""Visitor identity used to deduplicate views and likes."""
from __future__ import annotations

from typing import Protocol

from starlette.requests import HTTPConnection

UNKNOWN_VISITOR = "unknown"


class VisitorIdentity(Protocol):
    """Capability that maps an inbound connection to a visitor id."""

    def resolve(self, connection: HTTPConnection) -> str:
        """Return the visitor identifier for ``connection``."""
        ...


class NetworkAddressIdentity:
    """Identify visitors by the network address the server observes.

    Visitors sharing an address count as one; a visitor whose address changes
    counts as a new one.
    """

    def __init__(self, trust_forwarded_for: bool = False) -> None:
        self.trust_forwarded_for = trust_forwarded_for

    def resolve(self, connection: HTTPConnection) -> str:
        if self.trust_forwarded_for:
            forwarded = connection.headers.get("x-forwarded-for")
            if forwarded:
                first = forwarded.split(",")[0].strip()
                if first:
                    return first
        if connection.client and connection.client.host:
            return connection.client.host
        return UNKNOWN_VISITOR
