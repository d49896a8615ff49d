"""
API dependency helpers.

``get_current_user_context`` is the access-control gate: every post
procedure depends on it, so an unauthenticated request is rejected before
the route body (and any post query) runs.
"""
import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from postboard.api.auth import extract_session_token, get_or_create_user, resolve_identity_from_headers
from postboard.api.errors import unauthenticated
from postboard.db import models
from postboard.db.database import get_db
from postboard.db.repositories import sessions as session_repo
from postboard.utils.runtime import DEV_USER_EMAIL, DEV_USER_NAME, dev_mode_active
from postboard.utils.token_crypto import parse_token, verify_secret

logger = logging.getLogger(__name__)

# Contract:
# Returns (sqlalchemy User model, current_user_context_dict)
# Raises 401 UNAUTHENTICATED if identity cannot be resolved.


def _context_for(user: models.User, session: Optional[models.UserSession] = None) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "display_name": user.display_name,
        "session_id": session.id if session else None,
    }


def _user_from_session_token(db: Session, raw_token: str) -> Tuple[models.User, Dict[str, Any]]:
    parsed = parse_token(raw_token)
    if not parsed:
        logger.warning("session_rejected: reason=format")
        raise unauthenticated("Invalid session token")
    session = session_repo.get_by_token_id(db, token_id=parsed.token_id)
    if not session or not verify_secret(parsed.secret, session.token_hash):
        logger.warning("session_rejected: reason=unknown token_id=%s", parsed.token_id)
        raise unauthenticated("Invalid session token")
    if session.status != "active":
        logger.warning("session_rejected: reason=revoked token_id=%s", parsed.token_id)
        raise unauthenticated("Session revoked")
    if session_repo.is_expired(session):
        logger.warning("session_rejected: reason=expired token_id=%s", parsed.token_id)
        raise unauthenticated("Session expired")
    user = db.query(models.User).filter(models.User.id == session.user_id).first()
    if not user:
        raise unauthenticated("Invalid session user")
    session_repo.mark_used_now(db, session=session)
    return user, _context_for(user, session)


def get_current_user_context(
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(default=None),
    x_session_token: Optional[str] = Header(default=None),
    x_auth_request_user: Optional[str] = Header(default=None),
    x_auth_request_email: Optional[str] = Header(default=None),
    x_forwarded_user: Optional[str] = Header(default=None),
    x_forwarded_email: Optional[str] = Header(default=None),
) -> Tuple[models.User, Dict[str, Any]]:
    """Resolve the caller from a session token, dev mode, or proxy headers."""
    raw_token = extract_session_token(authorization, x_session_token)
    if raw_token:
        return _user_from_session_token(db, raw_token)

    try:
        is_dev_mode = dev_mode_active()
    except RuntimeError as exc:
        logger.error("DEV_MODE misconfiguration detected: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="DEV_MODE misconfigured")

    if is_dev_mode:
        email, name = DEV_USER_EMAIL, DEV_USER_NAME
    else:
        name, email = resolve_identity_from_headers(
            x_auth_request_user=x_auth_request_user,
            x_auth_request_email=x_auth_request_email,
            x_forwarded_user=x_forwarded_user,
            x_forwarded_email=x_forwarded_email,
        )
        if not email:
            raise unauthenticated()
    user = get_or_create_user(db, email=email, display_name=name)
    return user, _context_for(user)
