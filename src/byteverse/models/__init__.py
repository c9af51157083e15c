# src/byteverse/models/__init__.py
"""SQLAlchemy models for the ByteVerse application."""

from .user import Admin, Role, User

__all__ = [
    "Admin",
    "Role",
    "User",
]
