"""
Dependency injection functions for the API.
"""

import uuid
from typing import Optional

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core.security import verify_token
from app.core.storage import get_blob_store
from app.db.repositories import PlaylistRepository, SongRepository
from app.db.session import get_db
from app.services.catalog import PlaylistManager, UploadCoordinator
from app.services.storage.blob_store import BlobStoreGateway


# Database dependency
db_dependency = get_db

# Blob store dependency
blob_store_dependency = get_blob_store

# OAuth2 scheme for token extraction from Authorization header
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="api/auth/token",
    auto_error=False,  # Don't auto-raise errors to allow cookie fallback
)


def _credentials_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_token(
    token: Optional[str] = Depends(oauth2_scheme),
    access_token: Optional[str] = Cookie(None),
) -> Optional[str]:
    """
    Extract token from either Authorization header or cookie.

    Prioritizes the Authorization header token if available.
    """
    return token or access_token


async def get_optional_user_id(
    token: Optional[str] = Depends(get_token),
) -> Optional[uuid.UUID]:
    """
    Id of the authenticated user, or None for anonymous requests.

    A token that is present but invalid is rejected rather than treated as
    anonymous.
    """
    if not token:
        return None

    try:
        payload = verify_token(token)
        return uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise _credentials_error("Invalid authentication credentials")


async def get_current_user_id(
    user_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
) -> uuid.UUID:
    """Id of the authenticated user; anonymous requests are rejected."""
    if user_id is None:
        raise _credentials_error("Not authenticated")
    return user_id


def get_song_repository(db: Session = Depends(db_dependency)) -> SongRepository:
    return SongRepository(db)


def get_playlist_repository(
    db: Session = Depends(db_dependency),
) -> PlaylistRepository:
    return PlaylistRepository(db)


def get_upload_coordinator(
    songs: SongRepository = Depends(get_song_repository),
    blob_store: BlobStoreGateway = Depends(blob_store_dependency),
) -> UploadCoordinator:
    return UploadCoordinator(songs, blob_store)


def get_playlist_manager(
    playlists: PlaylistRepository = Depends(get_playlist_repository),
    songs: SongRepository = Depends(get_song_repository),
) -> PlaylistManager:
    return PlaylistManager(playlists, songs)
