"""
REST API endpoints for playlists.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.config import DEFAULT_PAGE_SIZE, MAX_PLAYLIST_PAGE_SIZE
from app.db.repositories import PlaylistRepository
from app.dependencies import (
    get_current_user_id,
    get_optional_user_id,
    get_playlist_manager,
    get_playlist_repository,
)
from app.schemas.catalog import (
    MessageResponse,
    PlaylistCreate,
    PlaylistPage,
    PlaylistResponse,
    PlaylistSongAdd,
    PlaylistUpdate,
)
from app.services.catalog import CatalogFilters, PlaylistManager, list_playlists

router = APIRouter(prefix="/api/playlists", tags=["playlists"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_playlist(
    data: PlaylistCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    manager: PlaylistManager = Depends(get_playlist_manager),
):
    """Create an empty playlist owned by the current user."""
    playlist = manager.create_playlist(user_id, data)
    return {
        "message": "Playlist created successfully",
        "playlist": PlaylistResponse.model_validate(playlist),
    }


@router.get("/my-playlists", response_model=PlaylistPage)
async def get_my_playlists(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PLAYLIST_PAGE_SIZE),
    user_id: uuid.UUID = Depends(get_current_user_id),
    playlists: PlaylistRepository = Depends(get_playlist_repository),
    manager: PlaylistManager = Depends(get_playlist_manager),
):
    filters = CatalogFilters(public_only=False, owner_id=user_id)
    items, pagination = list_playlists(playlists, filters, page=page, page_size=limit)
    return {
        "playlists": [manager.load_songs(playlist, user_id) for playlist in items],
        "pagination": pagination,
    }


@router.get("/public", response_model=PlaylistPage)
async def get_public_playlists(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PLAYLIST_PAGE_SIZE),
    search: Optional[str] = Query(None, max_length=100),
    user_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    playlists: PlaylistRepository = Depends(get_playlist_repository),
    manager: PlaylistManager = Depends(get_playlist_manager),
):
    filters = CatalogFilters(public_only=True, search=search)
    items, pagination = list_playlists(playlists, filters, page=page, page_size=limit)
    return {
        "playlists": [manager.load_songs(playlist, user_id) for playlist in items],
        "pagination": pagination,
    }


@router.get("/{playlist_id}")
async def get_playlist(
    playlist_id: uuid.UUID,
    user_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    manager: PlaylistManager = Depends(get_playlist_manager),
):
    playlist = manager.get_playlist(playlist_id, user_id)
    return {"playlist": PlaylistResponse.model_validate(playlist)}


@router.put("/{playlist_id}")
async def update_playlist(
    playlist_id: uuid.UUID,
    data: PlaylistUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    manager: PlaylistManager = Depends(get_playlist_manager),
):
    playlist = manager.update_playlist(
        playlist_id, user_id, data.model_dump(exclude_unset=True)
    )
    return {
        "message": "Playlist updated successfully",
        "playlist": PlaylistResponse.model_validate(playlist),
    }


@router.delete("/{playlist_id}", response_model=MessageResponse)
async def delete_playlist(
    playlist_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    manager: PlaylistManager = Depends(get_playlist_manager),
):
    manager.delete_playlist(playlist_id, user_id)
    return {"message": "Playlist deleted successfully"}


@router.post("/{playlist_id}/songs")
async def add_song_to_playlist(
    playlist_id: uuid.UUID,
    data: PlaylistSongAdd,
    user_id: uuid.UUID = Depends(get_current_user_id),
    manager: PlaylistManager = Depends(get_playlist_manager),
):
    playlist = manager.append_song(playlist_id, data.song_id, user_id)
    return {
        "message": "Song added to playlist successfully",
        "playlist": PlaylistResponse.model_validate(playlist),
    }


@router.delete("/{playlist_id}/songs/{song_id}")
async def remove_song_from_playlist(
    playlist_id: uuid.UUID,
    song_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    manager: PlaylistManager = Depends(get_playlist_manager),
):
    playlist = manager.remove_song(playlist_id, song_id, user_id)
    return {
        "message": "Song removed from playlist successfully",
        "playlist": PlaylistResponse.model_validate(playlist),
    }
