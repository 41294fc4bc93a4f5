"""HTTP and realtime API for Code Share."""
