"""
REST API endpoints for songs.

Thin layer over the upload coordinator and the catalog query planner.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from app.core.config import DEFAULT_PAGE_SIZE, MAX_SONG_PAGE_SIZE
from app.db.repositories import SongRepository
from app.dependencies import (
    get_current_user_id,
    get_optional_user_id,
    get_song_repository,
    get_upload_coordinator,
)
from app.schemas.catalog import (
    MessageResponse,
    PlayCountResponse,
    SongCreate,
    SongPage,
    SongResponse,
    SongUpdate,
)
from app.services.catalog import (
    CatalogFilters,
    SongSortField,
    SortOrder,
    UploadCoordinator,
    list_songs,
)

router = APIRouter(prefix="/api/songs", tags=["songs"])


@router.post("/upload", status_code=status.HTTP_201_CREATED)
async def upload_song(
    audio: UploadFile = File(...),
    title: str = Form(...),
    artist: str = Form(...),
    album: Optional[str] = Form(None),
    genre: Optional[str] = Form(None),
    duration: Optional[int] = Form(None),
    is_public: bool = Form(True),
    user_id: uuid.UUID = Depends(get_current_user_id),
    coordinator: UploadCoordinator = Depends(get_upload_coordinator),
):
    """
    Upload an audio file with its metadata.

    Metadata is validated before anything is written to the blob store.
    """
    try:
        metadata = SongCreate(
            title=title,
            artist=artist,
            album=album,
            genre=genre,
            duration=duration,
            is_public=is_public,
        )
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False))

    data = await audio.read()
    song = await coordinator.upload(
        data=data,
        content_type=audio.content_type or "",
        size=audio.size if audio.size is not None else len(data),
        owner_id=user_id,
        metadata=metadata,
        filename=audio.filename,
    )

    return {
        "message": "Song uploaded successfully",
        "song": SongResponse.model_validate(song),
    }


@router.get("", response_model=SongPage)
async def get_public_songs(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_SONG_PAGE_SIZE),
    search: Optional[str] = Query(None, max_length=100),
    genre: Optional[str] = Query(None, max_length=50),
    sort_by: SongSortField = SongSortField.created_at,
    sort_order: SortOrder = SortOrder.desc,
    songs: SongRepository = Depends(get_song_repository),
):
    """List public songs with optional search, genre filter and sorting."""
    filters = CatalogFilters(public_only=True, search=search, genre=genre)
    items, pagination = list_songs(songs, filters, sort_by, sort_order, page, limit)
    return {"songs": items, "pagination": pagination}


@router.get("/my-songs", response_model=SongPage)
async def get_my_songs(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_SONG_PAGE_SIZE),
    user_id: uuid.UUID = Depends(get_current_user_id),
    songs: SongRepository = Depends(get_song_repository),
):
    """List the current user's songs, newest first, private ones included."""
    filters = CatalogFilters(public_only=False, owner_id=user_id)
    items, pagination = list_songs(songs, filters, page=page, page_size=limit)
    return {"songs": items, "pagination": pagination}


@router.get("/{song_id}")
async def get_song(
    song_id: uuid.UUID,
    user_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    coordinator: UploadCoordinator = Depends(get_upload_coordinator),
):
    song = coordinator.get_song(song_id, user_id)
    return {"song": SongResponse.model_validate(song)}


@router.put("/{song_id}")
async def update_song(
    song_id: uuid.UUID,
    data: SongUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    coordinator: UploadCoordinator = Depends(get_upload_coordinator),
):
    """Update song metadata. The audio file itself cannot be replaced."""
    song = coordinator.update_metadata(
        song_id, user_id, data.model_dump(exclude_unset=True)
    )
    return {
        "message": "Song updated successfully",
        "song": SongResponse.model_validate(song),
    }


@router.delete("/{song_id}", response_model=MessageResponse)
async def delete_song(
    song_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    coordinator: UploadCoordinator = Depends(get_upload_coordinator),
):
    await coordinator.retire(song_id, user_id)
    return {"message": "Song deleted successfully"}


@router.post("/{song_id}/play", response_model=PlayCountResponse)
async def play_song(
    song_id: uuid.UUID,
    user_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    coordinator: UploadCoordinator = Depends(get_upload_coordinator),
):
    play_count = coordinator.record_play(song_id, user_id)
    return {"play_count": play_count}
