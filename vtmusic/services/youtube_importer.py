from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from sqlalchemy.orm import Session

from vtmusic.clients.youtube import YouTubeClient, YouTubeNotConfigured, YouTubeVideo
from vtmusic.db import models as m
from vtmusic.db import schemas as s
from vtmusic.services.catalog import create_song, create_vtuber

logger = logging.getLogger(__name__)

# First keyword hit wins; anything else is "pop"
_GENRE_KEYWORDS = (
    ("rock", ("rock", "ロック")),
    ("jazz", ("jazz", "ジャズ")),
    ("ballad", ("ballad", "バラード")),
    ("anime", ("anime", "アニメ")),
)
DEFAULT_GENRE = "pop"

_COVER_MARKERS = ("cover", "歌ってみた", "カバー")
_ORIGINAL_TITLE_RES = (re.compile(r"【(.+?)】"), re.compile(r"「(.+?)」"))


@dataclass
class ImportStats:
    added: int = 0
    skipped: int = 0
    vtubers_created: int = 0
    failed_queries: int = 0


def classify_genre(title: str) -> str:
    low = title.lower()
    for genre, keywords in _GENRE_KEYWORDS:
        if any(k in low for k in keywords):
            return genre
    return DEFAULT_GENRE


def extract_original_song(title: str) -> Optional[str]:
    """
    Cover titles usually bracket the original: '【Song】歌ってみた', '「Song」 cover'.
    Returns None for titles that are not marked as covers.
    """
    low = title.lower()
    if not any(marker in low for marker in _COVER_MARKERS):
        return None
    for pattern in _ORIGINAL_TITLE_RES:
        match = pattern.search(title)
        if match:
            return match.group(1).strip() or None
    return None


def _clip(value: Optional[str], size: int) -> Optional[str]:
    return value[:size] if value else value


def _parse_published(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return datetime.now(timezone.utc)


def _get_or_create_vtuber(db: Session, video: YouTubeVideo, stats: ImportStats) -> m.VTuber:
    row = db.query(m.VTuber).filter(m.VTuber.name == video.channel_title).first()
    if row:
        return row
    stats.vtubers_created += 1
    return create_vtuber(
        db,
        name=video.channel_title,
        channel_url=f"https://www.youtube.com/channel/{video.channel_id}",
        avatar_url=video.thumbnail_url,
    )


def import_videos(db: Session, videos: Iterable[YouTubeVideo]) -> ImportStats:
    """
    Upsert VTubers by channel title and insert songs not seen before (by video_url).
    Commits once at the end.
    """
    stats = ImportStats()
    for video in videos:
        exists = db.query(m.Song.id).filter(m.Song.video_url == video.video_url).first()
        if exists:
            stats.skipped += 1
            logger.debug("skip (already exists): %s", video.title)
            continue

        vtuber = _get_or_create_vtuber(db, video, stats)
        create_song(db, s.SongCreate(
            title=_clip(video.title, 500) or "(untitled)",
            vtuber_id=vtuber.id,
            thumbnail_url=video.thumbnail_url,
            video_url=video.video_url,
            duration=video.duration,
            genre=classify_genre(video.title),
            original_song=_clip(extract_original_song(video.title), 500),
            upload_date=_parse_published(video.published_at),
            view_count=video.view_count,
        ))
        stats.added += 1
        logger.info("added: %s", video.title)

    db.commit()
    return stats


async def import_queries(
    db: Session,
    client: YouTubeClient,
    queries: Sequence[str],
    *,
    max_results: int = 10,
    delay: float = 0.0,
) -> ImportStats:
    """
    Search and import each query in turn. A query whose search or import
    fails is rolled back, logged and skipped; the rest still run.
    A missing API key stops the run.
    """
    total = ImportStats()
    for i, query in enumerate(queries):
        if i and delay:
            # stay well under the API quota
            await asyncio.sleep(delay)
        try:
            videos = await client.search_videos(query, max_results)
            stats = import_videos(db, videos)
        except YouTubeNotConfigured:
            raise
        except Exception:
            db.rollback()
            total.failed_queries += 1
            logger.exception("import failed for query %r", query)
            continue

        total.added += stats.added
        total.skipped += stats.skipped
        total.vtubers_created += stats.vtubers_created
        logger.info(
            "%r: found %d added %d skipped %d new vtubers %d",
            query, len(videos), stats.added, stats.skipped, stats.vtubers_created,
        )
    return total
