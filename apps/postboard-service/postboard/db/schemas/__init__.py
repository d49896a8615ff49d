"""
Pydantic schemas for the postboard service.

Wire names are camelCase (``authorId``, ``totalCount``); Python attributes
stay snake_case and both spellings are accepted on input.
"""

from .users import User
from .sessions import SessionIssued, SessionRevoked
from .posts import (
    PostCreate,
    PostUpdate,
    Post,
    PostSummary,
    PostUpdateResult,
    PostDeleteResult,
    PaginatedPosts,
)

__all__ = [
    "User",
    "SessionIssued",
    "SessionRevoked",
    "PostCreate",
    "PostUpdate",
    "Post",
    "PostSummary",
    "PostUpdateResult",
    "PostDeleteResult",
    "PaginatedPosts",
]
