from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship, Mapped, mapped_column

Base = declarative_base()


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)

    # Subject issued by the external identity provider
    open_id: Mapped[str] = mapped_column(sa.String(64), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(sa.Text)
    email: Mapped[str | None] = mapped_column(sa.String(320))
    login_method: Mapped[str | None] = mapped_column(sa.String(64))
    role: Mapped[str] = mapped_column(sa.String(10), nullable=False, server_default="user")

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
        onupdate=sa.func.now(), nullable=False
    )
    last_signed_in: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )

    __table_args__ = (sa.CheckConstraint("role in ('user','admin')", name="ck_users_role"),)


class VTuber(Base):
    __tablename__ = "vtubers"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(sa.Text)
    channel_url: Mapped[str | None] = mapped_column(sa.Text)
    description: Mapped[str | None] = mapped_column(sa.Text)

    # Denormalized; bumped whenever a song is inserted for this VTuber
    song_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0, server_default="0")

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
        onupdate=sa.func.now(), nullable=False
    )

    songs: Mapped[list["Song"]] = relationship("Song", back_populates="vtuber")


class Song(Base):
    __tablename__ = "songs"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(sa.String(500), nullable=False)
    vtuber_id: Mapped[int] = mapped_column(
        sa.Integer, ForeignKey("vtubers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    thumbnail_url: Mapped[str | None] = mapped_column(sa.Text)
    video_url: Mapped[str] = mapped_column(sa.Text, nullable=False)
    duration: Mapped[int] = mapped_column(sa.Integer, nullable=False)  # seconds

    # cover | original | singing_stream | pop | rock | ...
    genre: Mapped[str] = mapped_column(sa.String(100), nullable=False, index=True)
    # Non-null for covers
    original_song: Mapped[Optional[str]] = mapped_column(sa.String(500), nullable=True, index=True)

    upload_date: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    view_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0, server_default="0")

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
        onupdate=sa.func.now(), nullable=False
    )

    vtuber: Mapped[Optional["VTuber"]] = relationship("VTuber", back_populates="songs")
    tag_links: Mapped[list["SongTag"]] = relationship(
        "SongTag", back_populates="song", cascade="all, delete-orphan"
    )

    # Flattened artist fields for the read schema
    @property
    def vtuber_name(self) -> Optional[str]:
        return self.vtuber.name if self.vtuber else None

    @property
    def vtuber_avatar(self) -> Optional[str]:
        return self.vtuber.avatar_url if self.vtuber else None


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(sa.String(100), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )


class SongTag(Base):
    __tablename__ = "song_tags"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    song_id: Mapped[int] = mapped_column(
        sa.Integer, ForeignKey("songs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tag_id: Mapped[int] = mapped_column(
        sa.Integer, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )

    __table_args__ = (UniqueConstraint("song_id", "tag_id", name="uq_song_tags_song_tag"),)

    song: Mapped["Song"] = relationship("Song", back_populates="tag_links")
    tag: Mapped["Tag"] = relationship("Tag")


class Playlist(Base):
    __tablename__ = "playlists"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        sa.Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(sa.Text)
    cover_image_url: Mapped[str | None] = mapped_column(sa.Text)
    is_public: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
        onupdate=sa.func.now(), nullable=False
    )

    entries: Mapped[list["PlaylistSong"]] = relationship(
        "PlaylistSong",
        back_populates="playlist",
        cascade="all, delete-orphan",
        order_by="PlaylistSong.position",
    )

    __table_args__ = (Index("ix_playlists_user_updated", "user_id", "updated_at"),)


# Ordered playlist membership; positions only grow, gaps are allowed
class PlaylistSong(Base):
    __tablename__ = "playlist_songs"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    playlist_id: Mapped[int] = mapped_column(
        sa.Integer, ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False
    )
    song_id: Mapped[int] = mapped_column(
        sa.Integer, ForeignKey("songs.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    added_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )

    __table_args__ = (Index("ix_playlist_songs_playlist_position", "playlist_id", "position"),)

    playlist: Mapped["Playlist"] = relationship("Playlist", back_populates="entries")
    song: Mapped["Song"] = relationship("Song")


class Favorite(Base):
    __tablename__ = "favorites"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        sa.Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    song_id: Mapped[int] = mapped_column(
        sa.Integer, ForeignKey("songs.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )

    __table_args__ = (UniqueConstraint("user_id", "song_id", name="uq_favorites_user_song"),)

    song: Mapped["Song"] = relationship("Song")


# Append-only listening log; the same (user, song) may appear many times
class PlayHistory(Base):
    __tablename__ = "play_history"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        sa.Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    song_id: Mapped[int] = mapped_column(
        sa.Integer, ForeignKey("songs.id", ondelete="CASCADE"), nullable=False
    )
    played_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )

    __table_args__ = (Index("ix_play_history_user_played", "user_id", "played_at"),)

    song: Mapped["Song"] = relationship("Song")
