"""
Post repository functions.

Every function takes the caller's ``author_id`` explicitly and scopes its
statement by it, so a row owned by another account behaves exactly like a
missing row: reads return None and writes affect zero rows.
"""
from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from postboard.db import models, schemas
from postboard.db.models.base import now_utc

logger = logging.getLogger(__name__)

PLACEHOLDER_TITLE = "Untitled post"
PLACEHOLDER_CONTENT = "Start writing your post here."

_LIKE_ESCAPE = "\\"


@dataclass(frozen=True)
class PostPage:
    items: List[models.Post]
    page: int
    page_size: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size) if self.page_size > 0 else 0

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1


def _escape_like(term: str) -> str:
    return (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


def _owned(db: Session, author_id: uuid.UUID):
    return db.query(models.Post).filter(models.Post.author_id == author_id)


def list_posts(
    db: Session,
    *,
    author_id: uuid.UUID,
    page: int,
    page_size: int,
    q: str = "",
) -> PostPage:
    """Return one page of the caller's posts whose title contains ``q``.

    The count and the page are read inside the same transaction; either
    failing fails the whole call.
    """
    query = _owned(db, author_id)
    if q:
        query = query.filter(models.Post.title.ilike(f"%{_escape_like(q)}%", escape=_LIKE_ESCAPE))
    offset = (page - 1) * page_size
    try:
        total_count = query.order_by(None).count()
        # past the last row; offset may not even fit the driver's integer type
        if offset >= total_count:
            return PostPage(items=[], page=page, page_size=page_size, total_count=total_count)
        items = (
            query.order_by(models.Post.created_at.desc(), models.Post.id.desc())
            .offset(offset)
            .limit(page_size)
            .all()
        )
    except SQLAlchemyError:
        db.rollback()
        raise
    return PostPage(items=items, page=page, page_size=page_size, total_count=total_count)


def get_post(db: Session, *, post_id: uuid.UUID, author_id: uuid.UUID) -> Optional[models.Post]:
    return _owned(db, author_id).filter(models.Post.id == post_id).first()


def create_post(
    db: Session,
    *,
    author_id: uuid.UUID,
    payload: Optional[schemas.PostCreate] = None,
) -> models.Post:
    payload = payload or schemas.PostCreate()
    now = now_utc()
    db_post = models.Post(
        title=payload.title or PLACEHOLDER_TITLE,
        content=payload.content or PLACEHOLDER_CONTENT,
        author_id=author_id,
        created_at=now,
        updated_at=now,
    )
    try:
        db.add(db_post)
        db.commit()
        db.refresh(db_post)
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("post_created: id=%s author_id=%s", db_post.id, author_id)
    return db_post


def update_post(
    db: Session,
    *,
    post_id: uuid.UUID,
    author_id: uuid.UUID,
    payload: schemas.PostUpdate,
) -> Optional[schemas.PostUpdateResult]:
    """Apply the supplied fields; None when no owned row matched."""
    values = payload.model_dump(exclude_none=True)
    values["updated_at"] = now_utc()
    try:
        affected = (
            _owned(db, author_id)
            .filter(models.Post.id == post_id)
            .update(values, synchronize_session=False)
        )
        if not affected:
            db.rollback()
            return None
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("post_updated: id=%s fields=%s", post_id, sorted(k for k in values if k != "updated_at"))
    return schemas.PostUpdateResult(id=post_id, affected_rows=affected, updated_at=values["updated_at"])


def delete_post(db: Session, *, post_id: uuid.UUID, author_id: uuid.UUID) -> Optional[uuid.UUID]:
    """Hard-delete an owned post and return its id; None when nothing matched."""
    try:
        affected = (
            _owned(db, author_id)
            .filter(models.Post.id == post_id)
            .delete(synchronize_session=False)
        )
        if not affected:
            db.rollback()
            return None
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("post_deleted: id=%s author_id=%s", post_id, author_id)
    return post_id
