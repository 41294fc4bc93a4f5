# src/codeshare/models/__init__.py
"""SQLAlchemy models for the Code Share application."""

from .snapshot import BoardSnapshot

__all__ = ["BoardSnapshot"]
