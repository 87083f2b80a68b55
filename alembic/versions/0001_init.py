from alembic import op
import sqlalchemy as sa

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(*, updated: bool = True):
    cols = [sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)]
    if updated:
        cols.append(sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False))
    return cols


def upgrade():
    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("open_id", sa.String(length=64), nullable=False, unique=True),
        sa.Column("name", sa.Text(), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("login_method", sa.String(length=64), nullable=True),
        sa.Column("role", sa.String(length=10), nullable=False, server_default="user"),
        *_timestamps(),
        sa.Column("last_signed_in", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("role in ('user','admin')", name="ck_users_role"),
    )

    # --- vtubers ---
    op.create_table(
        "vtubers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("channel_url", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("song_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )

    # --- songs ---
    op.create_table(
        "songs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("vtuber_id", sa.Integer(), sa.ForeignKey("vtubers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("thumbnail_url", sa.Text(), nullable=True),
        sa.Column("video_url", sa.Text(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("genre", sa.String(length=100), nullable=False),
        sa.Column("original_song", sa.String(length=500), nullable=True),
        sa.Column("upload_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_songs_vtuber_id", "songs", ["vtuber_id"])
    op.create_index("ix_songs_genre", "songs", ["genre"])
    op.create_index("ix_songs_original_song", "songs", ["original_song"])

    # --- tags / song_tags ---
    op.create_table(
        "tags",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
        *_timestamps(updated=False),
    )
    op.create_table(
        "song_tags",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("song_id", sa.Integer(), sa.ForeignKey("songs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("tag_id", sa.Integer(), sa.ForeignKey("tags.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(updated=False),
        sa.UniqueConstraint("song_id", "tag_id", name="uq_song_tags_song_tag"),
    )
    op.create_index("ix_song_tags_song_id", "song_tags", ["song_id"])
    op.create_index("ix_song_tags_tag_id", "song_tags", ["tag_id"])

    # --- playlists / playlist_songs ---
    op.create_table(
        "playlists",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("cover_image_url", sa.Text(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_playlists_user_updated", "playlists", ["user_id", "updated_at"])

    op.create_table(
        "playlist_songs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("playlist_id", sa.Integer(), sa.ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False),
        sa.Column("song_id", sa.Integer(), sa.ForeignKey("songs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("added_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_playlist_songs_playlist_position", "playlist_songs", ["playlist_id", "position"])

    # --- favorites ---
    op.create_table(
        "favorites",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("song_id", sa.Integer(), sa.ForeignKey("songs.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(updated=False),
        sa.UniqueConstraint("user_id", "song_id", name="uq_favorites_user_song"),
    )

    # --- play_history ---
    op.create_table(
        "play_history",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("song_id", sa.Integer(), sa.ForeignKey("songs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("played_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_play_history_user_played", "play_history", ["user_id", "played_at"])


def downgrade():
    op.drop_index("ix_play_history_user_played", table_name="play_history")
    op.drop_table("play_history")
    op.drop_table("favorites")

    op.drop_index("ix_playlist_songs_playlist_position", table_name="playlist_songs")
    op.drop_table("playlist_songs")
    op.drop_index("ix_playlists_user_updated", table_name="playlists")
    op.drop_table("playlists")

    op.drop_index("ix_song_tags_tag_id", table_name="song_tags")
    op.drop_index("ix_song_tags_song_id", table_name="song_tags")
    op.drop_table("song_tags")
    op.drop_table("tags")

    op.drop_index("ix_songs_original_song", table_name="songs")
    op.drop_index("ix_songs_genre", table_name="songs")
    op.drop_index("ix_songs_vtuber_id", table_name="songs")
    op.drop_table("songs")

    op.drop_table("vtubers")
    op.drop_table("users")
