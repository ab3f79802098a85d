"""Create song and playlist tables

Revision ID: 5c1e9a7d3b20
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "5c1e9a7d3b20"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create song and playlist tables with their search indexes."""
    op.create_table(
        "song",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("artist", sa.String(100), nullable=False),
        sa.Column("album", sa.String(100), nullable=True),
        sa.Column("genre", sa.String(50), nullable=True),
        sa.Column("duration", sa.Integer, nullable=True),
        sa.Column("blob_url", sa.Text, nullable=False),
        sa.Column("blob_key", sa.String(512), nullable=False, unique=True),
        sa.Column("file_size", sa.BigInteger, nullable=False),
        sa.Column("mime_type", sa.String(20), nullable=False),
        sa.Column("user_id", sa.UUID(as_uuid=True), nullable=False),
        sa.Column("play_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("play_count >= 0", name="ck_song_play_count"),
        sa.CheckConstraint(
            "duration IS NULL OR duration >= 0", name="ck_song_duration"
        ),
    )
    op.create_index("ix_song_user_id", "song", ["user_id"])
    op.create_index("ix_song_play_count", "song", ["play_count"])
    op.create_index("ix_song_created_at", "song", ["created_at"])
    op.execute(
        "CREATE INDEX ix_song_search ON song USING gin "
        "(to_tsvector('english', coalesce(title, '') || ' ' || coalesce(artist, '') "
        "|| ' ' || coalesce(album, '')))"
    )

    op.create_table(
        "playlist",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("cover_image", sa.String(500), nullable=True),
        sa.Column("song_ids", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("revision", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_playlist_user_id", "playlist", ["user_id"])
    op.create_index("ix_playlist_created_at", "playlist", ["created_at"])
    op.execute(
        "CREATE INDEX ix_playlist_search ON playlist USING gin "
        "(to_tsvector('english', coalesce(name, '') || ' ' "
        "|| coalesce(description, '')))"
    )


def downgrade() -> None:
    """Drop song and playlist tables."""
    op.drop_table("playlist")
    op.drop_table("song")
