from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from vtmusic.api.deps import get_db
from vtmusic.db import schemas as s
from vtmusic.services import catalog
from vtmusic.services.related import DEFAULT_LIMIT, get_related_songs

router = APIRouter(prefix="/songs", tags=["songs"])


# --- routes: listing ---------------------------------------------------------
@router.get("", response_model=List[s.Song])
def list_songs(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
):
    return catalog.list_songs(db, skip=skip, limit=limit)


@router.get("/search", response_model=List[s.Song])
def search_songs(
    db: Session = Depends(get_db),
    q: str = Query(..., max_length=200, description="case-insensitive match on title or original song"),
    genre: Optional[str] = Query(None, max_length=100),
    vtuber_id: Optional[int] = Query(None, ge=1),
    original_song: Optional[str] = Query(None, max_length=500),
):
    return catalog.search_songs(db, q, genre=genre, vtuber_id=vtuber_id, original_song=original_song)


@router.get("/by-genre/{genre}", response_model=List[s.Song])
def songs_by_genre(
    genre: str = Path(..., min_length=1, max_length=100),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return catalog.songs_by_genre(db, genre, limit=limit)


@router.get("/by-original", response_model=List[s.Song])
def songs_by_original(
    original_song: str = Query(..., min_length=1, max_length=500),
    db: Session = Depends(get_db),
):
    return catalog.songs_by_original(db, original_song)


# --- routes: single song -----------------------------------------------------
@router.get("/{song_id}", response_model=Optional[s.Song])
def get_song(song_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
    """Missing songs answer with null rather than 404."""
    return catalog.get_song(db, song_id)


@router.get("/{song_id}/related", response_model=List[s.Song])
def related_songs(
    song_id: int = Path(..., ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=50),
    db: Session = Depends(get_db),
):
    return get_related_songs(db, song_id, limit=limit)


@router.get("/{song_id}/tags", response_model=List[s.Tag])
def song_tags(song_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
    return catalog.tags_for_song(db, song_id)
