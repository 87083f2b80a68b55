from __future__ import annotations

import logging
from typing import List, Optional

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from vtmusic.db import models as m
from vtmusic.db import schemas as s

logger = logging.getLogger(__name__)


def _song_fields(song: m.Song) -> dict:
    return s.Song.model_validate(song).model_dump(exclude={"video_id"})


# --- Playlists ---------------------------------------------------------------

def list_playlists(db: Session, user_id: int) -> List[m.Playlist]:
    return (
        db.query(m.Playlist)
          .filter(m.Playlist.user_id == user_id)
          .order_by(m.Playlist.updated_at.desc(), m.Playlist.id.desc())
          .all()
    )


def get_playlist(db: Session, user_id: int, playlist_id: int) -> Optional[m.Playlist]:
    """Only the owner's playlists are visible."""
    return (
        db.query(m.Playlist)
          .filter(m.Playlist.id == playlist_id, m.Playlist.user_id == user_id)
          .first()
    )


def create_playlist(db: Session, user_id: int, payload: s.PlaylistCreate) -> m.Playlist:
    row = m.Playlist(user_id=user_id, **payload.model_dump())
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def update_playlist(db: Session, row: m.Playlist, payload: s.PlaylistUpdate) -> m.Playlist:
    for field, value in payload.model_dump(exclude_unset=True).items():
        if field in ("name", "is_public") and value is None:
            continue
        setattr(row, field, value)
    db.commit()
    db.refresh(row)
    return row


def delete_playlist(db: Session, row: m.Playlist) -> None:
    db.delete(row)  # entries go with it (delete-orphan)
    db.commit()


def next_position(db: Session, playlist_id: int) -> int:
    current = (
        db.query(sa.func.max(m.PlaylistSong.position))
          .filter(m.PlaylistSong.playlist_id == playlist_id)
          .scalar()
    )
    return (current or 0) + 1


def add_song_to_playlist(db: Session, row: m.Playlist, song_id: int) -> m.PlaylistSong:
    """Append at max(position) + 1; earlier gaps are never reused."""
    entry = m.PlaylistSong(
        playlist_id=row.id,
        song_id=song_id,
        position=next_position(db, row.id),
    )
    db.add(entry)
    # adding a song counts as a playlist update
    row.updated_at = sa.func.now()
    db.commit()
    db.refresh(entry)
    return entry


def remove_song_from_playlist(db: Session, row: m.Playlist, song_id: int) -> int:
    removed = (
        db.query(m.PlaylistSong)
          .filter(m.PlaylistSong.playlist_id == row.id, m.PlaylistSong.song_id == song_id)
          .delete(synchronize_session="fetch")
    )
    if removed:
        row.updated_at = sa.func.now()
    db.commit()
    return removed


def playlist_songs(db: Session, playlist_id: int) -> List[s.PlaylistEntry]:
    rows = (
        db.query(m.PlaylistSong)
          .options(joinedload(m.PlaylistSong.song).joinedload(m.Song.vtuber))
          .filter(m.PlaylistSong.playlist_id == playlist_id)
          .order_by(m.PlaylistSong.position.asc())
          .all()
    )
    return [s.PlaylistEntry(**_song_fields(r.song), position=r.position) for r in rows]


# --- Favorites ---------------------------------------------------------------

def list_favorites(db: Session, user_id: int) -> List[s.FavoriteSong]:
    rows = (
        db.query(m.Favorite)
          .options(joinedload(m.Favorite.song).joinedload(m.Song.vtuber))
          .filter(m.Favorite.user_id == user_id)
          .order_by(m.Favorite.created_at.desc(), m.Favorite.id.desc())
          .all()
    )
    return [s.FavoriteSong(**_song_fields(r.song), favorited_at=r.created_at) for r in rows]


def is_favorite(db: Session, user_id: int, song_id: int) -> bool:
    return bool(
        db.query(
            sa.exists().where(m.Favorite.user_id == user_id, m.Favorite.song_id == song_id)
        ).scalar()
    )


def add_favorite(db: Session, user_id: int, song_id: int) -> None:
    """Idempotent: an existing (user, song) pair is left as is."""
    if is_favorite(db, user_id, song_id):
        return
    db.add(m.Favorite(user_id=user_id, song_id=song_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # only a concurrent insert of the same pair counts as success
        if not is_favorite(db, user_id, song_id):
            raise
        logger.info("favorite (%s, %s) already present", user_id, song_id)


def remove_favorite(db: Session, user_id: int, song_id: int) -> None:
    (
        db.query(m.Favorite)
          .filter(m.Favorite.user_id == user_id, m.Favorite.song_id == song_id)
          .delete(synchronize_session=False)
    )
    db.commit()


# --- Play history ------------------------------------------------------------

def list_history(db: Session, user_id: int, limit: int = 50) -> List[s.HistorySong]:
    rows = (
        db.query(m.PlayHistory)
          .options(joinedload(m.PlayHistory.song).joinedload(m.Song.vtuber))
          .filter(m.PlayHistory.user_id == user_id)
          .order_by(m.PlayHistory.played_at.desc(), m.PlayHistory.id.desc())
          .limit(limit)
          .all()
    )
    return [s.HistorySong(**_song_fields(r.song), played_at=r.played_at) for r in rows]


def add_history(db: Session, user_id: int, song_id: int) -> m.PlayHistory:
    row = m.PlayHistory(user_id=user_id, song_id=song_id)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
