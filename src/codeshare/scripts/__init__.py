"""Operational scripts for Code Share."""
