"""Pagination and session settings sourced from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class PaginationSettings:
    default_page: int
    default_page_size: int
    min_page_size: int
    max_page_size: int


DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100
DEFAULT_SESSION_TTL_HOURS = 720


def _normalize_int(value: str | None, default: int, *, minimum: int = 1) -> int:
    """Return a positive integer parsed from an environment-style value."""
    if value is None:
        return default
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    if parsed < minimum:
        return default
    return parsed


@lru_cache(maxsize=None)
def get_pagination_settings() -> PaginationSettings:
    """Return the cached pagination bounds.

    Bounds that contradict each other fall back to the built-in values so the
    default page size always lies inside ``[min_page_size, max_page_size]``.
    """
    min_size = _normalize_int(os.getenv("POSTS_MIN_PAGE_SIZE"), MIN_PAGE_SIZE)
    max_size = _normalize_int(os.getenv("POSTS_MAX_PAGE_SIZE"), MAX_PAGE_SIZE)
    if min_size > max_size:
        min_size, max_size = MIN_PAGE_SIZE, MAX_PAGE_SIZE
    default_size = _normalize_int(os.getenv("POSTS_DEFAULT_PAGE_SIZE"), DEFAULT_PAGE_SIZE)
    if not min_size <= default_size <= max_size:
        default_size = min(max(DEFAULT_PAGE_SIZE, min_size), max_size)
    return PaginationSettings(
        default_page=_normalize_int(os.getenv("POSTS_DEFAULT_PAGE"), DEFAULT_PAGE),
        default_page_size=default_size,
        min_page_size=min_size,
        max_page_size=max_size,
    )


@lru_cache(maxsize=None)
def session_ttl_hours() -> int:
    return _normalize_int(os.getenv("SESSION_TTL_HOURS"), DEFAULT_SESSION_TTL_HOURS)


def refresh_settings_cache() -> None:
    """Invalidate cached settings (useful for tests)."""
    get_pagination_settings.cache_clear()
    session_ttl_hours.cache_clear()
