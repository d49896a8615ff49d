"""
Repositories for bearer sessions.

Implements create/lookup/revoke and last-used updates. Raw tokens are only
returned from ``create_session``; the table keeps the Argon2 hash.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from postboard.db import models
from postboard.utils import token_crypto


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def create_session(
    db: Session,
    *,
    user_id: uuid.UUID,
    ttl_hours: Optional[int] = None,
) -> Tuple[models.UserSession, str]:
    token_id, secret, full_token = token_crypto.generate_token()
    now = _now()
    session = models.UserSession(
        user_id=user_id,
        token_id=token_id,
        token_hash=token_crypto.hash_secret(secret),
        status="active",
        created_at=now,
        expires_at=now + timedelta(hours=ttl_hours) if ttl_hours else None,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session, full_token


def get_by_token_id(db: Session, *, token_id: str) -> Optional[models.UserSession]:
    return (
        db.query(models.UserSession)
        .filter(models.UserSession.token_id == token_id)
        .first()
    )


def is_expired(session: models.UserSession, now: Optional[datetime] = None) -> bool:
    if session.expires_at is None:
        return False
    return (now or _now()) >= _as_aware(session.expires_at)


def revoke_session(db: Session, *, session_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    session = (
        db.query(models.UserSession)
        .filter(models.UserSession.id == session_id, models.UserSession.user_id == user_id)
        .first()
    )
    if not session:
        return False
    if session.status != "revoked":
        session.status = "revoked"
        session.revoked_at = _now()
        db.commit()
        db.refresh(session)
    return True


def mark_used_now(db: Session, *, session: models.UserSession) -> None:
    session.last_used_at = _now()
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
