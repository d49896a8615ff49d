"""
User endpoints.
"""
from fastapi import APIRouter, Depends

from postboard.api.deps import get_current_user_context
from postboard.db import schemas

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=schemas.User)
def get_me(user_context=Depends(get_current_user_context)):
    u, _current_user = user_context
    return u
