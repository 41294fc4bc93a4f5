# src/codeshare/models/snapshot.py
"""Storage row holding the whole board document."""

from datetime import datetime

from sqlalchemy import JSON, BigInteger, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from codeshare.db.session import Base
from codeshare.db.time import utcnow

SNAPSHOT_ROW_ID = 1


class BoardSnapshot(Base):
    """Single-row table carrying the serialized board snapshot.

    The whole document is the unit of consistency. ``version`` is bumped on
    every save and compared on write so a stale snapshot is never stored.
    """

    __tablename__ = "board_snapshot"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=SNAPSHOT_ROW_ID)
    version: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    document: Mapped[dict] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )
