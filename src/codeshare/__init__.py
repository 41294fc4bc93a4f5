"""Code Share: a single-author code snippet board with realtime updates."""

__version__ = "0.1.0"
