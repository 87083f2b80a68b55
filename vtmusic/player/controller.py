"""
Playback controller: owns current song, queue and position, and commands an
external playback device.

All coroutines are expected to run on one event loop. Device status callbacks
are delivered through `handle_status` on that same loop, so state mutations
never interleave and no locking is needed.

State is optimistic: commands update the fields immediately and the device's
reports (see `PlayerState.confirmed`) reconcile them later. Device failures
are logged and swallowed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Track:
    id: int
    title: str
    video_url: str
    duration: int  # seconds
    vtuber_name: Optional[str] = None
    thumbnail_url: Optional[str] = None

    @classmethod
    def from_song(cls, song) -> "Track":
        """Accepts a Song ORM row or read schema."""
        return cls(
            id=song.id,
            title=song.title,
            video_url=song.video_url,
            duration=song.duration,
            vtuber_name=getattr(song, "vtuber_name", None),
            thumbnail_url=getattr(song, "thumbnail_url", None),
        )


@dataclass(frozen=True)
class PlaybackStatus:
    """
    What the device reports back. `locator` names the media the report is
    about; devices that cannot tell leave it None.
    """
    position_seconds: float
    duration_seconds: float
    is_playing: bool
    did_finish: bool = False
    locator: Optional[str] = None


@dataclass
class PlayerState:
    current_song: Optional[Track] = None
    is_playing: bool = False
    position: float = 0.0
    duration: float = 0.0
    queue: List[Track] = field(default_factory=list)
    queue_index: int = 0
    # Last report from the device for the current song; None until it reports
    confirmed: Optional[PlaybackStatus] = None


class PlaybackDevice(Protocol):
    async def load(self, locator: str) -> None: ...
    async def play(self) -> None: ...
    async def pause(self) -> None: ...
    async def seek(self, position_seconds: float) -> None: ...


class PlaybackController:
    def __init__(self, device: PlaybackDevice):
        self.device = device
        self.state = PlayerState()
        # Bumped on every play(); an older load that finishes late must not start playback
        self._generation = 0

    # --- device plumbing -----------------------------------------------------

    async def _command(self, name: str, *args) -> bool:
        try:
            await getattr(self.device, name)(*args)
            return True
        except Exception:
            logger.exception("playback device command %s%r failed", name, args)
            return False

    # --- transport -----------------------------------------------------------

    async def play(self, song: Track) -> None:
        self._generation += 1
        generation = self._generation

        st = self.state
        st.current_song = song
        st.position = 0.0
        st.duration = float(song.duration)
        st.is_playing = True
        st.confirmed = None

        if not await self._command("load", song.video_url):
            return
        if generation != self._generation:
            logger.debug("load of song %s superseded", song.id)
            return
        if not st.is_playing:
            # paused while loading
            return
        await self._command("play")

    async def pause(self) -> None:
        if self.state.current_song is None:
            return
        self.state.is_playing = False
        await self._command("pause")

    async def resume(self) -> None:
        if self.state.current_song is None:
            return
        self.state.is_playing = True
        await self._command("play")

    async def seek_to(self, position: float) -> None:
        if self.state.current_song is None:
            return
        self.state.position = max(0.0, float(position))
        await self._command("seek", self.state.position)

    # --- queue ---------------------------------------------------------------

    async def play_next(self) -> None:
        queue = self.state.queue
        if not queue:
            return
        self.state.queue_index = (self.state.queue_index + 1) % len(queue)
        await self.play(queue[self.state.queue_index])

    async def play_previous(self) -> None:
        queue = self.state.queue
        if not queue:
            return
        self.state.queue_index = (self.state.queue_index - 1) % len(queue)
        await self.play(queue[self.state.queue_index])

    def add_to_queue(self, song: Track) -> None:
        self.state.queue.append(song)

    def clear_queue(self) -> None:
        self.state.queue.clear()
        self.state.queue_index = 0

    # --- device callbacks ----------------------------------------------------

    async def handle_status(self, status: PlaybackStatus) -> None:
        st = self.state
        if st.current_song is None:
            return
        if status.locator is not None and status.locator != st.current_song.video_url:
            logger.debug("stale status for %s ignored", status.locator)
            return
        st.position = status.position_seconds
        st.duration = status.duration_seconds
        st.is_playing = status.is_playing
        st.confirmed = status

        if status.did_finish:
            logger.debug("song %s finished, advancing", st.current_song.id)
            await self.play_next()
