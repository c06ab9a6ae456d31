"""Aggregate model imports for Alembic auto-detection."""

from officexpress.models.user import User, UserRole  # noqa: F401

__all__ = ["User", "UserRole"]
