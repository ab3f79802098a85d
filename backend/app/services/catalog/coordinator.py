"""
Upload consistency coordinator.

Songs live in two stores that share no transaction: the audio bytes in the
blob store and the Song record in the metadata repository. Uploads write the
blob first and the record second, deleting the blob again if the record
cannot be saved. Deletes remove the record first and the blob second. Either
way the only inconsistent state that can be left behind is an orphaned blob,
never a record pointing at missing bytes.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from app.core.config import ALLOWED_AUDIO_TYPES, MAX_UPLOAD_BYTES
from app.core.errors import (
    InvalidInput,
    NotFound,
    OrphanedBlob,
    UnsupportedMediaType,
)
from app.db.models import Song
from app.db.repositories import SongRepository
from app.schemas.catalog import SongCreate
from app.services.catalog.visibility import ensure_owner, ensure_readable
from app.services.storage.blob_store import BlobStoreGateway, generate_content_key

logger = logging.getLogger(__name__)


def report_orphaned_blob(
    blob_key: str, reason: str, cause: Optional[BaseException] = None
) -> OrphanedBlob:
    """Log a blob that no metadata record points at any more."""
    orphan = OrphanedBlob(blob_key, reason, cause)
    logger.error(
        f"{orphan.message} ({cause})",
        extra={"event": "orphaned_blob", "blob_key": blob_key, "reason": reason},
    )
    return orphan


class UploadCoordinator:
    """Keeps Song records and their blobs in step."""

    def __init__(self, songs: SongRepository, blob_store: BlobStoreGateway):
        self.songs = songs
        self.blob_store = blob_store

    async def upload(
        self,
        data: bytes,
        content_type: str,
        size: int,
        owner_id: uuid.UUID,
        metadata: SongCreate,
        filename: Optional[str] = None,
    ) -> Song:
        """
        Store an audio file and create its Song record.

        Args:
            data: Audio bytes
            content_type: Declared MIME type
            size: Declared size in bytes
            owner_id: Uploading user
            metadata: Song fields supplied by the uploader
            filename: Original file name, kept on the blob only

        Returns:
            The created song

        Raises:
            UnsupportedMediaType: If content_type is not an allowed audio type
            InvalidInput: If the payload is empty, too large or mis-sized
            StorageUnavailable: If the blob could not be written
            RepositoryUnavailable, InvalidInput, Conflict: If the record could
                not be saved; the blob has been deleted again by then
        """
        if content_type not in ALLOWED_AUDIO_TYPES:
            raise UnsupportedMediaType(
                "Invalid file type. Only MP3 and WAV files are allowed."
            )
        if not data or size <= 0:
            raise InvalidInput("Audio file is required")
        if size != len(data):
            raise InvalidInput("Declared size does not match the uploaded file")
        if size > MAX_UPLOAD_BYTES:
            raise InvalidInput(f"Audio file cannot exceed {MAX_UPLOAD_BYTES} bytes")

        key = generate_content_key(owner_id, filename)

        # Step 1: blob. Nothing to undo if this fails.
        location = await self.blob_store.put(
            key,
            data,
            content_type,
            metadata={"original-name": filename or "", "uploaded-by": str(owner_id)},
        )

        # Step 2: record. Undo step 1 if this fails.
        try:
            song = self.songs.create(
                **metadata.model_dump(),
                blob_url=location.url,
                blob_key=location.key,
                file_size=size,
                mime_type=content_type,
                user_id=owner_id,
                play_count=0,
            )
        except Exception as e:
            logger.warning(f"Saving song for blob {key} failed, removing blob: {e}")
            await self._compensate(key, e)
            raise

        logger.info(f"Uploaded song {song.id} for user {owner_id} as {key}")
        return song

    async def _compensate(self, key: str, error: Exception) -> None:
        try:
            await self.blob_store.delete(key)
        except Exception as delete_error:
            report_orphaned_blob(
                key, f"compensation after failed save ({error})", delete_error
            )

    def get_song(self, song_id: uuid.UUID, requester_id: Optional[uuid.UUID]) -> Song:
        song = self.songs.get(song_id)
        if song is None:
            raise NotFound("Song not found")
        ensure_readable(song, requester_id)
        return song

    def update_metadata(
        self, song_id: uuid.UUID, requester_id: uuid.UUID, changes: Dict[str, Any]
    ) -> Song:
        """Owner-only edit of title, artist, album, genre and visibility."""
        song = self.songs.get(song_id)
        if song is None:
            raise NotFound("Song not found")
        ensure_owner(
            song, requester_id, "Access denied. You can only update your own songs."
        )

        song = self.songs.update(song, changes)
        logger.info(f"Updated song {song_id}: {sorted(changes)}")
        return song

    async def retire(self, song_id: uuid.UUID, requester_id: uuid.UUID) -> None:
        """
        Remove a song from the catalog, then try to remove its blob.

        The catalog entry is gone as soon as the record is deleted; a failed
        blob delete afterwards is logged as an orphan and not raised.

        Raises:
            NotFound: If the song does not exist
            Forbidden: If requester_id is not the owner
            RepositoryUnavailable: If the record could not be deleted; the
                blob is left untouched
        """
        song = self.songs.get(song_id)
        if song is None:
            raise NotFound("Song not found")
        ensure_owner(
            song, requester_id, "Access denied. You can only delete your own songs."
        )

        key = song.blob_key
        if not self.songs.delete(song_id):
            raise NotFound("Song not found")

        try:
            await self.blob_store.delete(key)
        except Exception as e:
            report_orphaned_blob(key, f"cleanup after deleting song {song_id}", e)

        logger.info(f"Retired song {song_id}")

    def record_play(
        self, song_id: uuid.UUID, requester_id: Optional[uuid.UUID]
    ) -> int:
        """
        Count one play of a song and return the new total.

        Raises:
            NotFound: If the song does not exist
            Forbidden: If the song is private and requester_id is not the owner
        """
        song = self.songs.get(song_id)
        if song is None:
            raise NotFound("Song not found")
        ensure_readable(song, requester_id)

        play_count = self.songs.increment_play_count(song_id)
        if play_count is None:
            raise NotFound("Song not found")
        return play_count
