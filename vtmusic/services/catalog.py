from __future__ import annotations

import logging
from typing import List, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Query, Session, joinedload

from vtmusic.db import models as m
from vtmusic.db import schemas as s

logger = logging.getLogger(__name__)


# --- helpers -----------------------------------------------------------------

def song_query(db: Session) -> Query:
    """Songs with their VTuber eager-loaded (left join) for vtuber_name/vtuber_avatar."""
    return db.query(m.Song).options(joinedload(m.Song.vtuber))


def _like(q: str) -> str:
    return f"%{q}%"


# --- VTubers -----------------------------------------------------------------

def list_vtubers(db: Session, q: Optional[str] = None) -> List[m.VTuber]:
    query = db.query(m.VTuber)
    if q:
        query = query.filter(m.VTuber.name.ilike(_like(q)))
    return query.order_by(m.VTuber.song_count.desc(), m.VTuber.id.asc()).all()


def get_vtuber(db: Session, vtuber_id: int) -> Optional[m.VTuber]:
    return db.get(m.VTuber, vtuber_id)


def create_vtuber(
    db: Session,
    *,
    name: str,
    avatar_url: Optional[str] = None,
    channel_url: Optional[str] = None,
    description: Optional[str] = None,
) -> m.VTuber:
    """Do not commit; caller controls the transaction."""
    row = m.VTuber(
        name=name,
        avatar_url=avatar_url,
        channel_url=channel_url,
        description=description,
        song_count=0,
    )
    db.add(row)
    db.flush()
    return row


# --- Songs -------------------------------------------------------------------

def list_songs(db: Session, *, skip: int = 0, limit: int = 50) -> List[m.Song]:
    return (
        song_query(db)
          .order_by(m.Song.upload_date.desc(), m.Song.id.desc())
          .offset(skip)
          .limit(limit)
          .all()
    )


def get_song(db: Session, song_id: int) -> Optional[m.Song]:
    return song_query(db).filter(m.Song.id == song_id).first()


def song_exists(db: Session, song_id: int) -> bool:
    return bool(db.query(sa.exists().where(m.Song.id == song_id)).scalar())


def songs_by_vtuber(db: Session, vtuber_id: int) -> List[m.Song]:
    return (
        song_query(db)
          .filter(m.Song.vtuber_id == vtuber_id)
          .order_by(m.Song.upload_date.desc(), m.Song.id.desc())
          .all()
    )


def search_songs(
    db: Session,
    q: str,
    *,
    genre: Optional[str] = None,
    vtuber_id: Optional[int] = None,
    original_song: Optional[str] = None,
) -> List[m.Song]:
    """
    Title or original-song substring match, narrowed by exact genre, exact VTuber
    and an original-song substring. Most viewed first.
    """
    query = song_query(db).filter(
        sa.or_(m.Song.title.ilike(_like(q)), m.Song.original_song.ilike(_like(q)))
    )
    if genre:
        query = query.filter(m.Song.genre == genre)
    if vtuber_id:
        query = query.filter(m.Song.vtuber_id == vtuber_id)
    if original_song:
        query = query.filter(m.Song.original_song.ilike(_like(original_song)))
    return query.order_by(m.Song.view_count.desc(), m.Song.id.asc()).all()


def songs_by_genre(db: Session, genre: str, limit: int = 20) -> List[m.Song]:
    return (
        song_query(db)
          .filter(m.Song.genre == genre)
          .order_by(m.Song.upload_date.desc(), m.Song.id.desc())
          .limit(limit)
          .all()
    )


def songs_by_original(db: Session, original_song: str) -> List[m.Song]:
    return (
        song_query(db)
          .filter(m.Song.original_song == original_song)
          .order_by(m.Song.view_count.desc(), m.Song.id.asc())
          .all()
    )


def create_song(db: Session, payload: s.SongCreate) -> m.Song:
    """
    Insert a song and bump the owning VTuber's song_count.
    Do not commit; caller controls the transaction.
    """
    row = m.Song(**payload.model_dump())
    db.add(row)
    db.query(m.VTuber).filter(m.VTuber.id == payload.vtuber_id).update(
        {m.VTuber.song_count: m.VTuber.song_count + 1}, synchronize_session="fetch"
    )
    db.flush()
    logger.debug("song %s inserted for vtuber %s", row.id, payload.vtuber_id)
    return row


def genre_counts(db: Session) -> List[tuple[str, int]]:
    return (
        db.query(m.Song.genre, sa.func.count(m.Song.id))
          .group_by(m.Song.genre)
          .order_by(sa.func.count(m.Song.id).desc(), m.Song.genre.asc())
          .all()
    )


# --- Tags --------------------------------------------------------------------

def list_tags(db: Session) -> List[m.Tag]:
    return db.query(m.Tag).order_by(m.Tag.name.asc()).all()


def get_or_create_tag(db: Session, name: str) -> m.Tag:
    name = name.strip()
    row = db.query(m.Tag).filter(m.Tag.name == name).first()
    if row:
        return row
    row = m.Tag(name=name)
    db.add(row)
    db.flush()
    return row


def add_tag_to_song(db: Session, song_id: int, tag_id: int) -> None:
    exists = (
        db.query(m.SongTag)
          .filter(m.SongTag.song_id == song_id, m.SongTag.tag_id == tag_id)
          .first()
    )
    if not exists:
        db.add(m.SongTag(song_id=song_id, tag_id=tag_id))
        db.flush()


def tags_for_song(db: Session, song_id: int) -> List[m.Tag]:
    return (
        db.query(m.Tag)
          .join(m.SongTag, m.SongTag.tag_id == m.Tag.id)
          .filter(m.SongTag.song_id == song_id)
          .order_by(m.Tag.name.asc())
          .all()
    )


def songs_by_tag(db: Session, tag_id: int) -> List[m.Song]:
    return (
        song_query(db)
          .join(m.SongTag, m.SongTag.song_id == m.Song.id)
          .filter(m.SongTag.tag_id == tag_id)
          .order_by(m.Song.upload_date.desc(), m.Song.id.desc())
          .all()
    )
