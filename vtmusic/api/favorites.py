from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from vtmusic.api.deps import current_user_id, get_db
import vtmusic.db.schemas as s
from vtmusic.services import catalog, library

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("", response_model=List[s.FavoriteSong])
def list_favorites(
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
):
    return library.list_favorites(db, user_id)

@router.post("", response_model=s.Success)
def add_favorite(
    payload: s.FavoriteIn,
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
):
    """Adding an existing favorite is a no-op."""
    if not catalog.song_exists(db, payload.song_id):
        raise HTTPException(status_code=404, detail="song_not_found")
    library.add_favorite(db, user_id, payload.song_id)
    return s.Success()

@router.delete("/{song_id}", response_model=s.Success)
def remove_favorite(
    song_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
):
    library.remove_favorite(db, user_id, song_id)
    return s.Success()

@router.get("/{song_id}", response_model=s.FavoriteStatus)
def check_favorite(
    song_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
):
    return s.FavoriteStatus(song_id=song_id, is_favorite=library.is_favorite(db, user_id, song_id))
