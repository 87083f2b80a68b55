from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from vtmusic.api.deps import current_user_id, get_db
import vtmusic.db.schemas as s
from vtmusic.services import catalog, library

router = APIRouter(prefix="/history", tags=["history"])


@router.get("", response_model=List[s.HistorySong])
def list_history(
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
    limit: int = Query(50, ge=1, le=200),
):
    """Most recent plays first; repeats are kept."""
    return library.list_history(db, user_id, limit=limit)

@router.post("", response_model=s.Success, status_code=201)
def add_history(
    payload: s.HistoryIn,
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
):
    if not catalog.song_exists(db, payload.song_id):
        raise HTTPException(status_code=404, detail="song_not_found")
    library.add_history(db, user_id, payload.song_id)
    return s.Success()
