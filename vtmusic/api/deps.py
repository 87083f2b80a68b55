from __future__ import annotations

import logging
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from vtmusic.core.config import settings
from vtmusic.core.security import decode_token
from vtmusic.db import models as m
from vtmusic.db.session import SessionLocal

logger = logging.getLogger(__name__)

# --- deps --------------------------------------------------------------------

def get_db():
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

bearer = HTTPBearer(auto_error=False)


def _raw_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials:
        return credentials.credentials
    return request.cookies.get(settings.session_cookie_name)


def optional_claims(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Optional[dict]:
    """Claims for public routes that show more when a session is present."""
    token = _raw_token(request, credentials)
    if not token:
        return None
    try:
        return decode_token(token)
    except jwt.PyJWTError:
        return None


def require_auth(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> dict:
    token = _raw_token(request, credentials)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="missing_token")
    try:
        return decode_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="token_expired")
    except jwt.InvalidAudienceError:
        raise HTTPException(status_code=401, detail="invalid_audience")
    except jwt.InvalidIssuerError:
        raise HTTPException(status_code=401, detail="invalid_issuer")
    except jwt.PyJWTError:
        logger.info("rejected session token on %s", request.url.path)
        raise HTTPException(status_code=401, detail="invalid_token")


def _subject_id(claims: dict) -> int:
    try:
        user_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        raise HTTPException(status_code=401, detail="invalid_subject")
    if user_id < 1:
        raise HTTPException(status_code=401, detail="invalid_subject")
    return user_id


def current_user_id(
    claims: dict = Depends(require_auth),
    db: Session = Depends(get_db),
) -> int:
    """The caller's users.id; tokens for unknown users are rejected."""
    user_id = _subject_id(claims)
    if db.get(m.User, user_id) is None:
        raise HTTPException(status_code=401, detail="invalid_subject")
    return user_id
