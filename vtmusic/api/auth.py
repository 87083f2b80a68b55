from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from vtmusic.api.deps import get_db, optional_claims
from vtmusic.core.config import settings
import vtmusic.db.models as m
import vtmusic.db.schemas as s

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=Optional[s.UserPublic])
def me(db: Session = Depends(get_db), claims: Optional[dict] = Depends(optional_claims)):
    """The signed-in user, or null for anonymous callers."""
    if not claims:
        return None
    try:
        user_id = int(claims.get("sub"))
    except (TypeError, ValueError):
        return None
    return db.get(m.User, user_id)


@router.post("/logout", response_model=s.Success)
def logout(response: Response):
    response.delete_cookie(settings.session_cookie_name, path="/")
    return s.Success()
