"""
Session endpoints.

Mint a bearer session for an already-identified caller and revoke the
session used by the current request (logout).
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from postboard.api.deps import get_current_user_context
from postboard.api.errors import not_found
from postboard.db import schemas
from postboard.db.database import get_db
from postboard.db.repositories import sessions as session_repo
from postboard.utils.settings import session_ttl_hours

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", response_model=schemas.SessionIssued, status_code=status.HTTP_201_CREATED)
def create_session_endpoint(
    user_context=Depends(get_current_user_context),
    db: Session = Depends(get_db),
):
    u, _current_user = user_context
    session, token = session_repo.create_session(db, user_id=u.id, ttl_hours=session_ttl_hours())
    logger.info("session_created: id=%s user_id=%s", session.id, u.id)
    return {"id": session.id, "token": token, "expires_at": session.expires_at}


@router.delete("/current", response_model=schemas.SessionRevoked)
def revoke_current_session_endpoint(
    user_context=Depends(get_current_user_context),
    db: Session = Depends(get_db),
):
    u, current_user = user_context
    session_id = current_user.get("session_id")
    if not session_id or not session_repo.revoke_session(db, session_id=session_id, user_id=u.id):
        raise not_found("No session is attached to this request")
    logger.info("session_revoked: id=%s user_id=%s", session_id, u.id)
    return {"id": session_id, "status": "revoked"}
