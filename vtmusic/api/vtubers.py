from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from vtmusic.api.deps import get_db
from vtmusic.db import schemas as s
from vtmusic.services import catalog

router = APIRouter(prefix="/vtubers", tags=["vtubers"])


@router.get("", response_model=List[s.VTuber])
def list_vtubers(
    db: Session = Depends(get_db),
    q: Optional[str] = Query(None, max_length=255, description="case-insensitive search by name"),
):
    """Most prolific VTubers first."""
    return catalog.list_vtubers(db, q=q)


@router.get("/{vtuber_id}", response_model=Optional[s.VTuber])
def get_vtuber(vtuber_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
    return catalog.get_vtuber(db, vtuber_id)


@router.get("/{vtuber_id}/songs", response_model=List[s.Song])
def get_vtuber_songs(vtuber_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
    return catalog.songs_by_vtuber(db, vtuber_id)
