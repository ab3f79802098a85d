"""
Catalog services package initialization.
"""

from app.services.catalog.coordinator import UploadCoordinator, report_orphaned_blob
from app.services.catalog.playlists import PlaylistManager
from app.services.catalog.query_planner import (
    CatalogFilters,
    PlaylistSortField,
    SongSortField,
    SortOrder,
    list_playlists,
    list_songs,
)

__all__ = [
    "UploadCoordinator",
    "report_orphaned_blob",
    "PlaylistManager",
    "CatalogFilters",
    "PlaylistSortField",
    "SongSortField",
    "SortOrder",
    "list_playlists",
    "list_songs",
]
