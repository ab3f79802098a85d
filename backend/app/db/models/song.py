from sqlalchemy import BigInteger, Boolean, Column, Integer, String, Text, UUID
from sqlalchemy.orm import validates

from app.core.config import ALLOWED_AUDIO_TYPES
from app.core.errors import InvalidInput
from app.db.base import Base, TimestampMixin

# Maximum lengths for text fields
TEXT_LIMITS = {"title": 200, "artist": 100, "album": 100, "genre": 50}
REQUIRED_TEXT = ("title", "artist")

# Set once at upload time, never edited afterwards
IMMUTABLE_FIELDS = ("blob_url", "blob_key", "user_id")


class Song(Base, TimestampMixin):
    """Uploaded audio asset and the blob it points at."""

    title = Column(String(200), nullable=False)
    artist = Column(String(100), nullable=False)
    album = Column(String(100), nullable=True)
    genre = Column(String(50), nullable=True)
    duration = Column(Integer, nullable=True)  # seconds, client supplied

    # Blob reference
    blob_url = Column(Text, nullable=False)
    blob_key = Column(String(512), unique=True, nullable=False)
    file_size = Column(BigInteger, nullable=False)
    mime_type = Column(String(20), nullable=False)

    # Owner, kept as a bare reference since users live in another service
    user_id = Column(UUID(as_uuid=True), index=True, nullable=False)

    play_count = Column(Integer, default=0, nullable=False, index=True)
    is_public = Column(Boolean, default=True, nullable=False)

    @validates("title", "artist", "album", "genre")
    def validate_text(self, key, value):
        if value is None:
            if key in REQUIRED_TEXT:
                raise InvalidInput(f"{key.capitalize()} is required")
            return None
        value = value.strip()
        if key in REQUIRED_TEXT and not value:
            raise InvalidInput(f"{key.capitalize()} is required")
        if len(value) > TEXT_LIMITS[key]:
            raise InvalidInput(
                f"{key.capitalize()} cannot exceed {TEXT_LIMITS[key]} characters"
            )
        return value or None

    @validates("duration")
    def validate_duration(self, key, value):
        if value is not None and value < 0:
            raise InvalidInput("Duration cannot be negative")
        return value

    @validates("mime_type")
    def validate_mime_type(self, key, value):
        if value not in ALLOWED_AUDIO_TYPES:
            raise InvalidInput(f"Unsupported MIME type: {value}")
        return value

    @validates("file_size")
    def validate_file_size(self, key, value):
        if value is None or value <= 0:
            raise InvalidInput("File size is required")
        return value

    @validates("is_public")
    def validate_is_public(self, key, value):
        if value is None:
            raise InvalidInput("Visibility must be true or false")
        return bool(value)

    @validates("play_count")
    def validate_play_count(self, key, value):
        if value is not None and value < 0:
            raise InvalidInput("Play count cannot be negative")
        return value

    @validates(*IMMUTABLE_FIELDS)
    def validate_immutable(self, key, value):
        if not value:
            raise InvalidInput(f"{key} is required")
        current = self.__dict__.get(key)
        if current is not None and current != value:
            raise InvalidInput(f"{key} cannot be changed")
        return value

    @property
    def formatted_duration(self) -> str:
        """Duration rendered as m:ss."""
        if not self.duration:
            return "0:00"
        minutes, seconds = divmod(self.duration, 60)
        return f"{minutes}:{seconds:02d}"
