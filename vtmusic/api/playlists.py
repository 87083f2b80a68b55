from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from vtmusic.api.deps import current_user_id, get_db
import vtmusic.db.models as m
import vtmusic.db.schemas as s
from vtmusic.services import catalog, library

router = APIRouter(prefix="/playlists", tags=["playlists"])

# ---------------------------------------------------------------------------
# helpers

def _get_owned_or_404(db: Session, user_id: int, playlist_id: int) -> m.Playlist:
    row = library.get_playlist(db, user_id, playlist_id)
    if not row:
        raise HTTPException(status_code=404, detail="playlist_not_found")
    return row

# ---------------------------------------------------------------------------
# routes

@router.get("", response_model=List[s.Playlist])
def list_playlists(
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
):
    """The caller's playlists, most recently updated first."""
    return library.list_playlists(db, user_id)

@router.post("", response_model=s.Playlist, status_code=201)
def create_playlist(
    payload: s.PlaylistCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
):
    return library.create_playlist(db, user_id, payload)

@router.get("/{playlist_id}", response_model=Optional[s.Playlist])
def get_playlist(
    playlist_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
):
    return library.get_playlist(db, user_id, playlist_id)

@router.patch("/{playlist_id}", response_model=s.Playlist)
def update_playlist(
    payload: s.PlaylistUpdate,
    playlist_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
):
    row = _get_owned_or_404(db, user_id, playlist_id)
    return library.update_playlist(db, row, payload)

@router.delete("/{playlist_id}", response_model=s.Success)
def delete_playlist(
    playlist_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
):
    row = _get_owned_or_404(db, user_id, playlist_id)
    library.delete_playlist(db, row)
    return s.Success()

@router.get("/{playlist_id}/songs", response_model=List[s.PlaylistEntry])
def get_playlist_songs(
    playlist_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
):
    row = _get_owned_or_404(db, user_id, playlist_id)
    return library.playlist_songs(db, row.id)

@router.post("/{playlist_id}/songs", response_model=s.Success, status_code=201)
def add_playlist_song(
    payload: s.PlaylistSongIn,
    playlist_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
):
    row = _get_owned_or_404(db, user_id, playlist_id)
    if not catalog.song_exists(db, payload.song_id):
        raise HTTPException(status_code=404, detail="song_not_found")
    library.add_song_to_playlist(db, row, payload.song_id)
    return s.Success()

@router.delete("/{playlist_id}/songs/{song_id}", response_model=s.Success)
def remove_playlist_song(
    playlist_id: int = Path(..., ge=1),
    song_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
):
    row = _get_owned_or_404(db, user_id, playlist_id)
    library.remove_song_from_playlist(db, row, song_id)
    return s.Success()
