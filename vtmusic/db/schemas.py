from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional, List, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from vtmusic.clients.youtube import extract_video_id

# --- Constrained scalars -----------------------------------------------------

EntityId = Annotated[int, Field(ge=1)]
PlaylistName = Annotated[str, Field(min_length=1, max_length=255)]
UrlText = Annotated[str, Field(max_length=2048)]


# --- VTubers -----------------------------------------------------------------

class VTuber(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    avatar_url: Optional[str] = None
    channel_url: Optional[str] = None
    description: Optional[str] = None
    song_count: int
    created_at: datetime
    updated_at: datetime


# --- Songs -------------------------------------------------------------------

class Song(BaseModel):
    """Read schema (response); artist fields come from the vtubers join."""
    model_config = ConfigDict(from_attributes=True)
    id: int
    title: str
    vtuber_id: int
    vtuber_name: Optional[str] = None
    vtuber_avatar: Optional[str] = None
    thumbnail_url: Optional[str] = None
    video_url: str
    duration: int
    genre: str
    original_song: Optional[str] = None
    upload_date: datetime
    view_count: int

    @computed_field
    @property
    def video_id(self) -> Optional[str]:
        return extract_video_id(self.video_url)


class SongCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    vtuber_id: EntityId
    thumbnail_url: Optional[UrlText] = None
    video_url: UrlText
    duration: int = Field(ge=0)
    genre: str = Field(min_length=1, max_length=100)
    original_song: Optional[str] = Field(None, max_length=500)
    upload_date: datetime
    view_count: int = Field(0, ge=0)


class PlaylistEntry(Song):
    position: int


class FavoriteSong(Song):
    favorited_at: datetime


class HistorySong(Song):
    played_at: datetime


# --- Tags --------------------------------------------------------------------

class Tag(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str


# --- Playlists ---------------------------------------------------------------

class Playlist(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: int
    name: str
    description: Optional[str] = None
    cover_image_url: Optional[str] = None
    is_public: bool
    created_at: datetime
    updated_at: datetime

class PlaylistCreate(BaseModel):
    name: PlaylistName
    description: Optional[str] = Field(None, max_length=2000)
    cover_image_url: Optional[UrlText] = None
    is_public: bool = False

class PlaylistUpdate(BaseModel):
    # all optional so PATCH can be partial
    name: Optional[PlaylistName] = None
    description: Optional[str] = Field(None, max_length=2000)
    cover_image_url: Optional[UrlText] = None
    is_public: Optional[bool] = None

class PlaylistSongIn(BaseModel):
    song_id: EntityId


# --- Favorites / history -----------------------------------------------------

class FavoriteIn(BaseModel):
    song_id: EntityId

class FavoriteStatus(BaseModel):
    song_id: int
    is_favorite: bool

class HistoryIn(BaseModel):
    song_id: EntityId


# --- Users / generic ---------------------------------------------------------

class UserPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    open_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    login_method: Optional[str] = None
    role: Literal["user", "admin"]
    created_at: datetime
    last_signed_in: datetime

class Success(BaseModel):
    success: Literal[True] = True
