# src/codeshare/services/__init__.py
"""Business logic services for the Code Share application."""

from .broadcaster import Broadcaster, get_broadcaster
from .engine import EngagementEngine
from .identity import NetworkAddressIdentity, VisitorIdentity
from .store import JsonFileSnapshotStore, SnapshotStore, SqlSnapshotStore, get_store

__all__ = [
    "Broadcaster",
    "EngagementEngine",
    "JsonFileSnapshotStore",
    "NetworkAddressIdentity",
    "SnapshotStore",
    "SqlSnapshotStore",
    "VisitorIdentity",
    "get_broadcaster",
    "get_store",
]
