"""
SQLAlchemy models for the postboard service.

Exposes `Base`, `now_utc`, and all ORM classes from one import path so
Alembic and the repositories share a single metadata object.
"""

from .base import Base, now_utc  # re-export

from .users import User
from .sessions import UserSession
from .posts import Post

__all__ = [
    "Base",
    "now_utc",
    "User",
    "UserSession",
    "Post",
]
