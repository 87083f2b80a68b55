# YouTube Data API v3 client (httpx)
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from vtmusic.core.config import settings

logger = logging.getLogger(__name__)

YOUTUBE_API_BASE = "https://www.googleapis.com/youtube/v3"
MUSIC_CATEGORY_ID = "10"

_DURATION_RE = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")
_VIDEO_ID_PATTERNS = (
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([^&\n?#]+)"),
    re.compile(r"youtube\.com/watch\?.*v=([^&\n?#]+)"),
)


class YouTubeNotConfigured(RuntimeError):
    pass


@dataclass
class YouTubeVideo:
    id: str
    title: str
    channel_title: str
    channel_id: str
    thumbnail_url: Optional[str]
    duration: int  # seconds
    view_count: int
    published_at: str
    video_url: str


def parse_duration(value: Optional[str]) -> int:
    """
    ISO 8601 duration as used by the videos endpoint ('PT4M8S', 'PT1H2M', 'PT45S').
    Returns seconds; 0 when the string does not match.
    """
    if not value:
        return 0
    match = _DURATION_RE.fullmatch(value.strip())
    if not match:
        return 0
    hours, minutes, seconds = (int(g or 0) for g in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def extract_video_id(url: Optional[str]) -> Optional[str]:
    """
    Accepts watch, short (youtu.be) and embed URLs.
    Returns the video id or None for anything else.
    """
    if not url:
        return None
    for pattern in _VIDEO_ID_PATTERNS:
        match = pattern.search(url)
        if match and match.group(1):
            return match.group(1)
    return None


def _pick_thumbnail(thumbnails: Dict[str, Any]) -> Optional[str]:
    for size in ("high", "medium", "default"):
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return url
    return None


def _to_video(item: Dict[str, Any]) -> YouTubeVideo:
    snippet = item.get("snippet") or {}
    details = item.get("contentDetails") or {}
    stats = item.get("statistics") or {}
    try:
        views = int(stats.get("viewCount") or 0)
    except (TypeError, ValueError):
        views = 0
    video_id = item["id"]
    return YouTubeVideo(
        id=video_id,
        title=snippet.get("title", ""),
        channel_title=snippet.get("channelTitle", ""),
        channel_id=snippet.get("channelId", ""),
        thumbnail_url=_pick_thumbnail(snippet.get("thumbnails") or {}),
        duration=parse_duration(details.get("duration")),
        view_count=views,
        published_at=snippet.get("publishedAt", ""),
        video_url=f"https://www.youtube.com/watch?v={video_id}",
    )


class YouTubeClient:
    """
    Thin wrapper over the search/videos/channels/playlistItems endpoints.
    Network and HTTP failures are logged and reported as empty results.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: str = YOUTUBE_API_BASE,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        strict: bool = False,
    ):
        self.api_key = api_key if api_key is not None else settings.youtube_api_key
        self.strict = strict
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else settings.youtube_timeout_sec
        self._transport = transport

    def _require_key(self) -> str:
        if not self.api_key:
            raise YouTubeNotConfigured("Set YOUTUBE_API_KEY to fetch from the YouTube Data API")
        return self.api_key

    def _configured(self, what: str) -> bool:
        if self.api_key:
            return True
        if self.strict:
            self._require_key()
        logger.warning("YouTube API key not configured; %s skipped", what)
        return False

    async def _get(self, client: httpx.AsyncClient, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        r = await client.get(f"{self.base_url}/{path}", params={**params, "key": self._require_key()})
        r.raise_for_status()
        return r.json() or {}

    async def _video_details(self, client: httpx.AsyncClient, video_ids: List[str]) -> List[YouTubeVideo]:
        if not video_ids:
            return []
        data = await self._get(client, "videos", {
            "part": "snippet,contentDetails,statistics",
            "id": ",".join(video_ids),
        })
        return [_to_video(item) for item in data.get("items", [])]

    async def search_videos(self, query: str, max_results: int = 10) -> List[YouTubeVideo]:
        """
        GET /search (music category) then GET /videos for duration and view counts.
        """
        if not self._configured(f"search for {query!r}"):
            return []
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                found = await self._get(client, "search", {
                    "part": "snippet",
                    "q": query,
                    "type": "video",
                    "videoCategoryId": MUSIC_CATEGORY_ID,
                    "maxResults": max_results,
                })
                ids = [
                    (item.get("id") or {}).get("videoId")
                    for item in found.get("items", [])
                ]
                return await self._video_details(client, [i for i in ids if i])
        except httpx.HTTPError:
            logger.exception("YouTube search failed for %r", query)
            return []

    async def channel_videos(self, channel_id: str, max_results: int = 10) -> List[YouTubeVideo]:
        """Latest uploads of a channel via its uploads playlist."""
        if not self._configured(f"channel {channel_id}"):
            return []
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                channel = await self._get(client, "channels", {"part": "contentDetails", "id": channel_id})
                items = channel.get("items") or []
                uploads = (
                    ((items[0].get("contentDetails") or {}).get("relatedPlaylists") or {}).get("uploads")
                    if items else None
                )
                if not uploads:
                    return []
                playlist = await self._get(client, "playlistItems", {
                    "part": "snippet",
                    "playlistId": uploads,
                    "maxResults": max_results,
                })
                ids = [
                    ((item.get("snippet") or {}).get("resourceId") or {}).get("videoId")
                    for item in playlist.get("items", [])
                ]
                return await self._video_details(client, [i for i in ids if i])
        except httpx.HTTPError:
            logger.exception("YouTube channel fetch failed for %s", channel_id)
            return []

    async def search_covers(self, original_title: str, max_results: int = 10) -> List[YouTubeVideo]:
        return await self.search_videos(f"{original_title} cover 歌ってみた", max_results)
