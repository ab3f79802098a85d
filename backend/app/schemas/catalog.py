"""
Pydantic models for song and playlist schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.utils.datetime_helper import make_aware


def _strip(value):
    if isinstance(value, str):
        return value.strip()
    return value


class BlobLocation(BaseModel):
    """Where the blob store put an object."""

    key: str
    url: str
    size: int


class SongCreate(BaseModel):
    """Metadata supplied alongside an upload."""

    title: str = Field(min_length=1, max_length=200)
    artist: str = Field(min_length=1, max_length=100)
    album: Optional[str] = Field(default=None, max_length=100)
    genre: Optional[str] = Field(default=None, max_length=50)
    duration: Optional[int] = Field(default=None, ge=0)
    is_public: bool = True

    @field_validator("title", "artist", "album", "genre", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)


class SongUpdate(BaseModel):
    """Metadata-only edits of an existing song."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    artist: Optional[str] = Field(default=None, min_length=1, max_length=100)
    album: Optional[str] = Field(default=None, max_length=100)
    genre: Optional[str] = Field(default=None, max_length=50)
    is_public: Optional[bool] = None

    @field_validator("title", "artist", "album", "genre", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)

    @field_validator("title", "artist", "is_public")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class SongResponse(BaseModel):
    """Schema for song response."""

    id: uuid.UUID
    title: str
    artist: str
    album: Optional[str] = None
    genre: Optional[str] = None
    duration: Optional[int] = None
    formatted_duration: str
    blob_url: str
    blob_key: str
    file_size: int
    mime_type: str
    user_id: uuid.UUID
    play_count: int
    is_public: bool
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, value):
        return make_aware(value)

    class Config:
        from_attributes = True


class PlaylistCreate(BaseModel):
    """Schema for creating a playlist."""

    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    is_public: bool = False
    cover_image: Optional[str] = Field(default=None, max_length=500)

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)


class PlaylistUpdate(BaseModel):
    """Schema for updating playlist details."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    is_public: Optional[bool] = None
    cover_image: Optional[str] = Field(default=None, max_length=500)

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)

    @field_validator("name", "is_public")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class PlaylistSongAdd(BaseModel):
    """Schema for adding a song to a playlist."""

    song_id: uuid.UUID


class PlaylistResponse(BaseModel):
    """Schema for playlist response."""

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    user_id: uuid.UUID
    is_public: bool
    cover_image: Optional[str] = None
    song_ids: List[uuid.UUID] = Field(default_factory=list)
    song_count: int
    total_duration: int
    songs: Optional[List[SongResponse]] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, value):
        return make_aware(value)

    class Config:
        from_attributes = True


class Pagination(BaseModel):
    """Position of a result page within the full result set."""

    current_page: int
    total_pages: int
    total_items: int
    has_next: bool
    has_prev: bool


class SongPage(BaseModel):
    songs: List[SongResponse]
    pagination: Pagination


class PlaylistPage(BaseModel):
    playlists: List[PlaylistResponse]
    pagination: Pagination


class PlayCountResponse(BaseModel):
    message: str = "Play count updated"
    play_count: int


class MessageResponse(BaseModel):
    message: str
