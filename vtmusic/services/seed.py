from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from vtmusic.db import models as m
from vtmusic.db import schemas as s
from vtmusic.services.catalog import add_tag_to_song, create_song, create_vtuber, get_or_create_tag

logger = logging.getLogger(__name__)

PLACEHOLDER_AVATAR = "https://via.placeholder.com/150"
PLACEHOLDER_THUMB = "https://via.placeholder.com/480x360"

VTUBERS: List[Dict[str, str]] = [
    {"name": "星街すいせい", "channel_url": "https://www.youtube.com/@HoshimachiSuisei",
     "description": "ホロライブ所属のVTuber、歌唱力に定評がある"},
    {"name": "宝鐘マリン", "channel_url": "https://www.youtube.com/@HoushouMarine",
     "description": "ホロライブ所属のVTuber、海賊船長"},
    {"name": "天音かなた", "channel_url": "https://www.youtube.com/@AmaneKanata",
     "description": "ホロライブ所属のVTuber、天使"},
    {"name": "常闇トワ", "channel_url": "https://www.youtube.com/@TokoYami",
     "description": "ホロライブ所属のVTuber、悪魔"},
    {"name": "AZKi", "channel_url": "https://www.youtube.com/@AZKi",
     "description": "ホロライブ所属のVTuber、音楽特化"},
]

TAGS = ["J-POP", "アニソン", "ボカロ", "オリジナル曲", "バラード", "ロック", "アップテンポ", "コラボ"]


def _song(title, vtuber, video, duration, genre, original, uploaded, views, tags) -> Dict[str, Any]:
    return {
        "title": title,
        "vtuber": vtuber,
        "video_url": f"https://www.youtube.com/watch?v={video}",
        "duration": duration,
        "genre": genre,
        "original_song": original,
        "upload_date": datetime.fromisoformat(uploaded).replace(tzinfo=timezone.utc),
        "view_count": views,
        "tags": tags,
    }


SONGS: List[Dict[str, Any]] = [
    _song("Stellar Stellar", "星街すいせい", "a51VH9BYzZA", 243, "original", None,
          "2021-09-19", 15_000_000, ["オリジナル曲", "J-POP", "アップテンポ"]),
    _song("GHOST", "星街すいせい", "IKKar5SS29E", 221, "original", None,
          "2022-03-23", 12_000_000, ["オリジナル曲", "J-POP", "ロック"]),
    _song("キングダム (Cover)", "星街すいせい", "example1", 198, "cover", "キングダム",
          "2023-01-15", 5_000_000, ["J-POP", "アップテンポ"]),
    _song("宝島 (Cover)", "宝鐘マリン", "example2", 205, "cover", "宝島",
          "2022-08-10", 8_000_000, ["J-POP", "アップテンポ"]),
    _song("Unison (Cover)", "宝鐘マリン", "example3", 234, "cover", "Unison",
          "2023-02-20", 4_500_000, ["アニソン", "バラード"]),
    _song("残酷な天使のテーゼ (Cover)", "天音かなた", "example4", 245, "cover", "残酷な天使のテーゼ",
          "2022-11-05", 6_000_000, ["アニソン", "アップテンポ"]),
    _song("残酷な天使のテーゼ (Cover)", "常闇トワ", "example5", 248, "cover", "残酷な天使のテーゼ",
          "2023-03-12", 3_500_000, ["アニソン", "ロック"]),
    _song("千本桜 (Cover)", "AZKi", "example6", 241, "cover", "千本桜",
          "2022-06-18", 7_000_000, ["ボカロ", "アップテンポ"]),
    _song("千本桜 (Cover)", "星街すいせい", "example7", 239, "cover", "千本桜",
          "2021-12-25", 9_000_000, ["ボカロ", "アップテンポ"]),
    _song("歌枠アーカイブ #1", "宝鐘マリン", "example8", 3600, "singing_stream", None,
          "2023-04-01", 2_000_000, ["J-POP", "アニソン"]),
]


def reset_catalog(db: Session) -> None:
    """Remove every catalog and library row, children first."""
    for model in (m.SongTag, m.PlaylistSong, m.Favorite, m.PlayHistory, m.Playlist, m.Song, m.Tag, m.VTuber):
        db.query(model).delete(synchronize_session=False)
    db.flush()
    # bulk deletes bypass the identity map; drop stale instances
    db.expunge_all()


def seed_catalog(db: Session) -> Dict[str, int]:
    """Insert the sample VTubers, tags and songs; returns VTuber ids by name."""
    vtuber_ids: Dict[str, int] = {}
    for data in VTUBERS:
        row = create_vtuber(db, avatar_url=PLACEHOLDER_AVATAR, **data)
        vtuber_ids[row.name] = row.id

    tag_ids = {name: get_or_create_tag(db, name).id for name in TAGS}

    for data in SONGS:
        song = create_song(db, s.SongCreate(
            title=data["title"],
            vtuber_id=vtuber_ids[data["vtuber"]],
            thumbnail_url=PLACEHOLDER_THUMB,
            video_url=data["video_url"],
            duration=data["duration"],
            genre=data["genre"],
            original_song=data["original_song"],
            upload_date=data["upload_date"],
            view_count=data["view_count"],
        ))
        for tag in data["tags"]:
            add_tag_to_song(db, song.id, tag_ids[tag])

    db.commit()
    logger.info("seeded %d vtubers, %d tags, %d songs", len(vtuber_ids), len(tag_ids), len(SONGS))
    return vtuber_ids
