from __future__ import annotations

import logging
from typing import List

from sqlalchemy.orm import Session

from vtmusic.db import models as m
from vtmusic.services.catalog import get_song, song_query

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10


def _tier(db: Session, criterion, exclude: set[int], need: int) -> List[m.Song]:
    return (
        song_query(db)
          .filter(criterion, m.Song.id.notin_(sorted(exclude)))
          .order_by(m.Song.view_count.desc(), m.Song.id.asc())
          .limit(need)
          .all()
    )


def get_related_songs(db: Session, song_id: int, limit: int = DEFAULT_LIMIT) -> List[m.Song]:
    """
    Up to `limit` songs related to `song_id`, never the song itself.

    Tiers run in order and only while the result is still short:
      1. other covers of the same original song
      2. other songs by the same VTuber
      3. other songs in the same genre
    Each tier is ordered by view count (desc) and results are concatenated in
    tier order. A song matching several tiers is kept only at its first
    occurrence. Unknown song ids give an empty list.
    """
    source = get_song(db, song_id)
    if source is None or limit <= 0:
        return []

    tiers = []
    if source.original_song is not None:
        tiers.append(("cover", m.Song.original_song == source.original_song))
    tiers.append(("vtuber", m.Song.vtuber_id == source.vtuber_id))
    tiers.append(("genre", m.Song.genre == source.genre))

    related: List[m.Song] = []
    seen: set[int] = {source.id}
    for name, criterion in tiers:
        need = limit - len(related)
        if need <= 0:
            break
        rows = _tier(db, criterion, seen, need)
        logger.debug("related(%s) tier=%s matched=%d need=%d", song_id, name, len(rows), need)
        related.extend(rows)
        seen.update(r.id for r in rows)

    return related
