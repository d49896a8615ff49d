"""
Posts API endpoints.

The five post procedures (getAll, getOne, create, update, remove). Each one
runs behind the access-control gate and passes the caller's id explicitly to
the repository, so every statement is scoped to the caller's own rows.
"""
import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from postboard.api.deps import get_current_user_context
from postboard.api.errors import not_found, validation_error
from postboard.db import schemas
from postboard.db.database import get_db
from postboard.db.repositories import posts as post_repo
from postboard.utils.settings import get_pagination_settings

router = APIRouter(prefix="/posts", tags=["posts"])


@dataclass(frozen=True)
class PostListParams:
    page: int
    page_size: int
    q: str


def get_post_list_params(
    page: Optional[int] = Query(default=None),
    page_size: Optional[int] = Query(default=None, alias="pageSize"),
    q: str = Query(default=""),
) -> PostListParams:
    """Apply defaults and reject out-of-range values; nothing is clamped."""
    settings = get_pagination_settings()
    page = settings.default_page if page is None else page
    page_size = settings.default_page_size if page_size is None else page_size
    if page < 1:
        raise validation_error(("query", "page"), "page must be greater than or equal to 1", page)
    if not settings.min_page_size <= page_size <= settings.max_page_size:
        raise validation_error(
            ("query", "pageSize"),
            f"pageSize must be between {settings.min_page_size} and {settings.max_page_size}",
            page_size,
        )
    return PostListParams(page=page, page_size=page_size, q=q)


def _post_not_found(raw_id) -> Exception:
    # Same message whether the row is missing or owned by someone else
    return not_found(f"Post with id {raw_id} not found")


def _parse_post_id(raw_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(raw_id)
    except ValueError:
        raise _post_not_found(raw_id)


@router.get("/", response_model=schemas.PaginatedPosts)
def get_all_posts_endpoint(
    user_context=Depends(get_current_user_context),
    params: PostListParams = Depends(get_post_list_params),
    db: Session = Depends(get_db),
):
    u, _current_user = user_context
    result = post_repo.list_posts(
        db,
        author_id=u.id,
        page=params.page,
        page_size=params.page_size,
        q=params.q,
    )
    return {
        "items": result.items,
        "page": result.page,
        "page_size": result.page_size,
        "total_count": result.total_count,
        "total_pages": result.total_pages,
        "has_next_page": result.has_next_page,
        "has_prev_page": result.has_prev_page,
    }


@router.get("/{post_id}", response_model=schemas.Post)
def get_post_endpoint(
    post_id: str,
    user_context=Depends(get_current_user_context),
    db: Session = Depends(get_db),
):
    u, _current_user = user_context
    db_post = post_repo.get_post(db, post_id=_parse_post_id(post_id), author_id=u.id)
    if not db_post:
        raise _post_not_found(post_id)
    return db_post


@router.post("/", response_model=schemas.PostSummary, status_code=status.HTTP_201_CREATED)
def create_post_endpoint(
    payload: Optional[schemas.PostCreate] = None,
    user_context=Depends(get_current_user_context),
    db: Session = Depends(get_db),
):
    u, _current_user = user_context
    return post_repo.create_post(db, author_id=u.id, payload=payload)


@router.put("/{post_id}", response_model=schemas.PostUpdateResult)
@router.patch("/{post_id}", response_model=schemas.PostUpdateResult)
def update_post_endpoint(
    post_id: str,
    payload: schemas.PostUpdate,
    user_context=Depends(get_current_user_context),
    db: Session = Depends(get_db),
):
    u, _current_user = user_context
    result = post_repo.update_post(db, post_id=_parse_post_id(post_id), author_id=u.id, payload=payload)
    if result is None:
        raise _post_not_found(post_id)
    return result


@router.delete("/{post_id}", response_model=schemas.PostDeleteResult)
def delete_post_endpoint(
    post_id: str,
    user_context=Depends(get_current_user_context),
    db: Session = Depends(get_db),
):
    u, _current_user = user_context
    deleted_id = post_repo.delete_post(db, post_id=_parse_post_id(post_id), author_id=u.id)
    if deleted_id is None:
        raise _post_not_found(post_id)
    return {"id": deleted_id}
