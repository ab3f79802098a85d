from app.db.models.song import Song
from app.db.models.playlist import Playlist

__all__ = [
    "Song",
    "Playlist",
]
