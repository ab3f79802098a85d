from typing import List, Optional

from sqlalchemy import Boolean, Column, Integer, JSON, String, Text, UUID
from sqlalchemy.orm import validates

from app.core.errors import InvalidInput
from app.db.base import Base, TimestampMixin

NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
COVER_IMAGE_MAX_LENGTH = 500


class Playlist(Base, TimestampMixin):
    """Named, ordered collection of song references owned by one user."""

    user_id = Column(UUID(as_uuid=True), index=True, nullable=False)

    # Playlist details
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    is_public = Column(Boolean, default=False, nullable=False)
    cover_image = Column(String(500), nullable=True)  # URL to cover image

    # Song ids as strings, in play order. Non-owning references.
    song_ids = Column(JSON, default=list, nullable=False)

    # Bumped on every membership change, used for compare-and-set updates
    revision = Column(Integer, default=0, nullable=False)

    # Materialized songs, only present after attach_songs()
    _loaded_songs = None

    @validates("name")
    def validate_name(self, key, value):
        value = (value or "").strip()
        if not value:
            raise InvalidInput("Playlist name is required")
        if len(value) > NAME_MAX_LENGTH:
            raise InvalidInput(
                f"Playlist name cannot exceed {NAME_MAX_LENGTH} characters"
            )
        return value

    @validates("description")
    def validate_description(self, key, value):
        if value is None:
            return None
        value = value.strip()
        if len(value) > DESCRIPTION_MAX_LENGTH:
            raise InvalidInput(
                f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters"
            )
        return value

    @validates("is_public")
    def validate_is_public(self, key, value):
        if value is None:
            raise InvalidInput("Visibility must be true or false")
        return bool(value)

    @validates("cover_image")
    def validate_cover_image(self, key, value):
        if value is not None and len(value) > COVER_IMAGE_MAX_LENGTH:
            raise InvalidInput("Cover image URL is too long")
        return value

    @validates("user_id")
    def validate_owner(self, key, value):
        if value is None:
            raise InvalidInput("User ID is required")
        current = self.__dict__.get(key)
        if current is not None and current != value:
            raise InvalidInput("Playlist owner cannot be changed")
        return value

    def attach_songs(self, songs: List) -> None:
        """Mark the playlist's songs as loaded."""
        self._loaded_songs = list(songs)

    @property
    def songs_loaded(self) -> bool:
        return self._loaded_songs is not None

    @property
    def songs(self) -> Optional[List]:
        return self._loaded_songs

    @property
    def song_count(self) -> int:
        return len(self.song_ids or [])

    @property
    def total_duration(self) -> int:
        """Sum of song durations, 0 unless the songs were loaded."""
        if not self.songs_loaded:
            return 0
        return sum(song.duration or 0 for song in self._loaded_songs)
