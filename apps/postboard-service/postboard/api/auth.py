"""
Authentication helpers and identity resolution.

Parses identity-proxy headers, normalizes emails, and upserts the owning
account on first sight.
"""
from typing import Optional, Tuple
from sqlalchemy.orm import Session

from postboard.db import models


def _normalize_email(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    email = email.strip().lower()
    return email or None


def resolve_identity_from_headers(
    x_auth_request_user: Optional[str],
    x_auth_request_email: Optional[str],
    x_forwarded_user: Optional[str],
    x_forwarded_email: Optional[str],
) -> Tuple[Optional[str], Optional[str]]:
    user = x_auth_request_user or x_forwarded_user
    email = _normalize_email(x_auth_request_email or x_forwarded_email)
    return user, email


def extract_session_token(authorization: Optional[str], x_session_token: Optional[str]) -> Optional[str]:
    """Return the raw bearer credential, preferring the Authorization header."""
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()
        return token or None
    if x_session_token and x_session_token.strip():
        return x_session_token.strip()
    return None


def get_or_create_user(db: Session, email: str, display_name: Optional[str] = None) -> models.User:
    user = db.query(models.User).filter(models.User.email == email).first()
    if user:
        return user
    user = models.User(email=email, display_name=display_name or email.split("@")[0])
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
