from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from vtmusic.api.deps import get_db
from vtmusic.db import schemas as s
from vtmusic.services import catalog

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("", response_model=List[s.Tag])
def list_tags(db: Session = Depends(get_db)):
    return catalog.list_tags(db)


@router.get("/{tag_id}/songs", response_model=List[s.Song])
def songs_by_tag(tag_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
    return catalog.songs_by_tag(db, tag_id)
