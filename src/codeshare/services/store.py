"""Snapshot persistence for the board.

The whole board is one document. Callers ``load()`` it, mutate it in memory
and ``save()`` it back. Both backends compare the snapshot's ``version`` with
the stored one on save and raise :class:`SnapshotConflict` when another writer
got there first, so a stale snapshot never overwrites a newer one.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
import threading
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Protocol

from filelock import FileLock
from pydantic import ValidationError
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from codeshare.core.errors import PersistenceFailed, SnapshotConflict
from codeshare.core.settings import settings
from codeshare.db.time import utcnow
from codeshare.models import BoardSnapshot
from codeshare.models.snapshot import SNAPSHOT_ROW_ID
from codeshare.schemas import Snapshot

logger = logging.getLogger(__name__)

STORE_BACKEND_DATABASE = "database"
STORE_BACKEND_FILE = "file"


class SnapshotStore(Protocol):
    """Load/save contract for the board document."""

    def load(self) -> Snapshot:
        """Return the current snapshot, creating an empty one on first use."""
        ...

    def save(self, snapshot: Snapshot) -> Snapshot:
        """Persist ``snapshot`` and return it with its new version."""
        ...


class SqlSnapshotStore:
    """Keeps the document in a single ``board_snapshot`` row."""

    def __init__(self, session_factory: Callable[[], Session] | None = None) -> None:
        if session_factory is None:
            from codeshare.db.session import SessionLocal

            session_factory = SessionLocal
        self._session_factory = session_factory

    def load(self) -> Snapshot:
        try:
            with self._session_factory() as session:
                row = session.get(BoardSnapshot, SNAPSHOT_ROW_ID)
                if row is None:
                    row = self._initialize(session)
                return Snapshot.from_document(row.document, version=row.version)
        except SQLAlchemyError as err:
            logger.exception("Failed to load board snapshot")
            raise PersistenceFailed() from err
        except ValidationError as err:
            logger.exception("Stored board snapshot is malformed")
            raise PersistenceFailed() from err

    def _initialize(self, session: Session) -> BoardSnapshot:
        row = BoardSnapshot(
            id=SNAPSHOT_ROW_ID,
            version=0,
            document=Snapshot().to_document(),
        )
        session.add(row)
        try:
            session.commit()
        except IntegrityError:
            # Another request created the row first.
            session.rollback()
            row = session.get(BoardSnapshot, SNAPSHOT_ROW_ID)
            if row is None:
                raise
            return row
        logger.info("Initialized empty board snapshot")
        return row

    def save(self, snapshot: Snapshot) -> Snapshot:
        new_version = snapshot.version + 1
        document = snapshot.model_copy(update={"version": new_version}).to_document()
        try:
            with self._session_factory() as session:
                result = session.execute(
                    update(BoardSnapshot)
                    .where(
                        BoardSnapshot.id == SNAPSHOT_ROW_ID,
                        BoardSnapshot.version == snapshot.version,
                    )
                    .values(version=new_version, document=document, updated_at=utcnow())
                )
                if result.rowcount != 1:
                    session.rollback()
                    raise SnapshotConflict()
                session.commit()
        except SQLAlchemyError as err:
            logger.exception("Failed to save board snapshot")
            raise PersistenceFailed() from err
        snapshot.version = new_version
        return snapshot


class JsonFileSnapshotStore:
    """Keeps the document in one JSON file, rewritten whole on every save.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace`` so readers never see a partial document. The
    version check and the write happen under an OS lock on ``<path>.lock``, so
    several worker processes sharing the file still never overwrite each
    other. Waiting longer than ``lock_timeout`` seconds fails the operation.
    """

    def __init__(self, path: str | os.PathLike[str], lock_timeout: float = 10.0) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._file_lock = FileLock(f"{self.path}.lock", timeout=lock_timeout)

    @contextlib.contextmanager
    def _exclusive(self) -> Iterator[None]:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock, self._file_lock:
            yield

    def load(self) -> Snapshot:
        try:
            with self._exclusive():
                if not self.path.exists():
                    snapshot = Snapshot()
                    self._write(snapshot.to_document())
                    logger.info("Initialized empty board snapshot at %s", self.path)
                    return snapshot
                return Snapshot.from_document(self._read())
        except (OSError, ValueError) as err:
            # filelock.Timeout is an OSError too.
            logger.exception("Failed to load board snapshot from %s", self.path)
            raise PersistenceFailed() from err

    def save(self, snapshot: Snapshot) -> Snapshot:
        new_version = snapshot.version + 1
        document = snapshot.model_copy(update={"version": new_version}).to_document()
        try:
            with self._exclusive():
                stored_version = self._read().get("version", 0) if self.path.exists() else 0
                if stored_version != snapshot.version:
                    raise SnapshotConflict()
                self._write(document)
        except (OSError, ValueError) as err:
            logger.exception("Failed to save board snapshot to %s", self.path)
            raise PersistenceFailed() from err
        snapshot.version = new_version
        return snapshot

    def _read(self) -> dict:
        with self.path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    def _write(self, document: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".board-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


def build_store(backend: str | None = None) -> SnapshotStore:
    """Create the store selected by configuration."""
    backend = backend or settings.store_backend
    if backend == STORE_BACKEND_FILE:
        return JsonFileSnapshotStore(settings.store_path)
    if backend == STORE_BACKEND_DATABASE:
        return SqlSnapshotStore()
    raise ValueError(f"Unknown store backend: {backend!r}")


class _StoreSingleton:
    """Singleton wrapper for the configured snapshot store."""

    _instance: SnapshotStore | None = None

    @classmethod
    def get_instance(cls) -> SnapshotStore:
        """Get or create the singleton store instance."""
        if cls._instance is None:
            cls._instance = build_store()
        return cls._instance


def get_store() -> SnapshotStore:
    """Return the process-wide snapshot store."""
    return _StoreSingleton.get_instance()
