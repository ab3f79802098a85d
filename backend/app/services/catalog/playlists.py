"""
Playlist ownership and membership rules.

The metadata store has no foreign keys between playlists and songs, so the
rules are enforced here: only owners change a playlist, a song can only be
added if the owner may see it, and a song appears at most once.
"""

import logging
import uuid
from typing import Any, Callable, Dict, List, Optional

from app.core.config import MEMBERSHIP_UPDATE_ATTEMPTS
from app.core.errors import Conflict, Forbidden, NotFound
from app.db.models import Playlist
from app.db.repositories import PlaylistRepository, SongRepository
from app.schemas.catalog import PlaylistCreate
from app.services.catalog.visibility import can_read, ensure_owner, ensure_readable

logger = logging.getLogger(__name__)


class PlaylistManager:
    """Create, read and modify playlists on behalf of a requester."""

    def __init__(self, playlists: PlaylistRepository, songs: SongRepository):
        self.playlists = playlists
        self.songs = songs

    def _load(self, playlist_id: uuid.UUID) -> Playlist:
        playlist = self.playlists.get(playlist_id)
        if playlist is None:
            raise NotFound("Playlist not found")
        return playlist

    def load_songs(
        self, playlist: Playlist, requester_id: Optional[uuid.UUID]
    ) -> Playlist:
        """
        Materialize the playlist's songs in order.

        Ids of deleted songs and of songs the requester may not read are
        skipped; the stored sequence itself is left as is.
        """
        found = self.songs.get_many(playlist.song_ids or [])
        songs = [
            found[song_id]
            for song_id in playlist.song_ids or []
            if song_id in found and can_read(found[song_id], requester_id)
        ]
        playlist.attach_songs(songs)
        return playlist

    def create_playlist(self, owner_id: uuid.UUID, data: PlaylistCreate) -> Playlist:
        playlist = self.playlists.create(
            **data.model_dump(), user_id=owner_id, song_ids=[], revision=0
        )
        logger.info(f"Created playlist {playlist.id} for user {owner_id}")
        return playlist

    def get_playlist(
        self, playlist_id: uuid.UUID, requester_id: Optional[uuid.UUID]
    ) -> Playlist:
        playlist = self._load(playlist_id)
        ensure_readable(playlist, requester_id)
        return self.load_songs(playlist, requester_id)

    def update_playlist(
        self, playlist_id: uuid.UUID, requester_id: uuid.UUID, changes: Dict[str, Any]
    ) -> Playlist:
        playlist = self._load(playlist_id)
        ensure_owner(
            playlist,
            requester_id,
            "Access denied. You can only update your own playlists.",
        )
        playlist = self.playlists.update(playlist, changes)
        logger.info(f"Updated playlist {playlist_id}: {sorted(changes)}")
        return self.load_songs(playlist, requester_id)

    def delete_playlist(self, playlist_id: uuid.UUID, requester_id: uuid.UUID) -> None:
        """Delete a playlist. The songs it referenced are not touched."""
        playlist = self._load(playlist_id)
        ensure_owner(
            playlist,
            requester_id,
            "Access denied. You can only delete your own playlists.",
        )
        if not self.playlists.delete(playlist_id):
            raise NotFound("Playlist not found")

    def append_song(
        self, playlist_id: uuid.UUID, song_id: uuid.UUID, requester_id: uuid.UUID
    ) -> Playlist:
        """
        Add a song to the end of a playlist.

        Raises:
            NotFound: If the playlist or the song does not exist
            Forbidden: If requester_id does not own the playlist, or the song
                is private and owned by someone else
            Conflict: If the song is already in the playlist
        """
        key = str(song_id)

        def append(playlist: Playlist, song_ids: List[str]) -> List[str]:
            song = self.songs.get(song_id)
            if song is None:
                raise NotFound("Song not found")
            if not can_read(song, playlist.user_id):
                raise Forbidden("Cannot add private song to playlist")
            if key in song_ids:
                raise Conflict("Song is already in the playlist")
            return song_ids + [key]

        playlist = self._modify_songs(playlist_id, requester_id, append)
        logger.info(f"Added song {song_id} to playlist {playlist_id}")
        return playlist

    def remove_song(
        self, playlist_id: uuid.UUID, song_id: uuid.UUID, requester_id: uuid.UUID
    ) -> Playlist:
        """
        Remove a song from a playlist, keeping the order of the others.

        Raises:
            NotFound: If the playlist does not exist or does not contain the song
            Forbidden: If requester_id does not own the playlist
        """
        key = str(song_id)

        def remove(playlist: Playlist, song_ids: List[str]) -> List[str]:
            if key not in song_ids:
                raise NotFound("Song not found in playlist")
            remaining = list(song_ids)
            remaining.remove(key)
            return remaining

        playlist = self._modify_songs(playlist_id, requester_id, remove)
        logger.info(f"Removed song {song_id} from playlist {playlist_id}")
        return playlist

    def _modify_songs(
        self,
        playlist_id: uuid.UUID,
        requester_id: uuid.UUID,
        change: Callable[[Playlist, List[str]], List[str]],
    ) -> Playlist:
        """
        Read, change and compare-and-set the song sequence.

        A lost race re-reads the playlist and re-runs every check against the
        fresh sequence, so a concurrent append of the same song still ends in
        Conflict rather than a duplicate.
        """
        for attempt in range(1, MEMBERSHIP_UPDATE_ATTEMPTS + 1):
            playlist = self._load(playlist_id)
            ensure_owner(
                playlist,
                requester_id,
                "Access denied. You can only modify your own playlists.",
            )
            revision = playlist.revision
            song_ids = change(playlist, list(playlist.song_ids or []))

            if self.playlists.replace_song_ids(playlist_id, revision, song_ids):
                return self.load_songs(self._load(playlist_id), requester_id)

            logger.info(
                f"Retrying update of playlist {playlist_id} "
                f"(attempt {attempt} of {MEMBERSHIP_UPDATE_ATTEMPTS})"
            )

        raise Conflict("Playlist was modified concurrently, please try again")
