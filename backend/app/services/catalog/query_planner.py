"""
Catalog query planner.

Turns listing options into a single filtered, sorted and paginated query
against the metadata repository.
"""

import math
import uuid
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field
from sqlalchemy import asc, desc, func

from app.core.config import (
    DEFAULT_PAGE_SIZE,
    MAX_PLAYLIST_PAGE_SIZE,
    MAX_SONG_PAGE_SIZE,
)
from app.core.errors import InvalidInput
from app.db.models import Playlist, Song
from app.db.repositories import BaseRepository, PlaylistRepository, SongRepository
from app.schemas.catalog import Pagination

SEARCH_MAX_LENGTH = 100


class SongSortField(str, Enum):
    created_at = "created_at"
    title = "title"
    artist = "artist"
    play_count = "play_count"


class PlaylistSortField(str, Enum):
    created_at = "created_at"
    name = "name"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


class CatalogFilters(BaseModel):
    """Optional filters for a catalog listing. Unset fields do not filter."""

    public_only: bool = True
    owner_id: Optional[uuid.UUID] = None
    search: Optional[str] = Field(default=None, max_length=SEARCH_MAX_LENGTH)
    genre: Optional[str] = Field(default=None, max_length=50)


def paginate(page: int, page_size: int, max_page_size: int) -> Tuple[int, int]:
    """
    Offset and limit for a 1-based page.

    Raises:
        InvalidInput: If page is below 1 or page_size is outside 1..max_page_size
    """
    if page < 1:
        raise InvalidInput("Page must be a positive integer")
    if page_size < 1 or page_size > max_page_size:
        raise InvalidInput(f"Limit must be between 1 and {max_page_size}")
    return (page - 1) * page_size, page_size


def describe_page(page: int, page_size: int, total: int) -> Pagination:
    total_pages = math.ceil(total / page_size)
    return Pagination(
        current_page=page,
        total_pages=total_pages,
        total_items=total,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


def build_criteria(repository: BaseRepository, filters: CatalogFilters) -> List:
    model = repository.model
    criteria = []
    if filters.public_only:
        criteria.append(model.is_public.is_(True))
    if filters.owner_id is not None:
        criteria.append(model.user_id == filters.owner_id)
    search = (filters.search or "").strip()
    if search:
        criteria.append(repository.text_search(search))
    genre = (filters.genre or "").strip()
    if genre:
        if not hasattr(model, "genre"):
            raise InvalidInput("Genre filter only applies to songs")
        criteria.append(func.lower(model.genre) == genre.lower())
    return criteria


def _run(
    repository: BaseRepository,
    filters: CatalogFilters,
    sort_column,
    order: SortOrder,
    page: int,
    page_size: int,
    max_page_size: int,
):
    offset, limit = paginate(page, page_size, max_page_size)
    criteria = build_criteria(repository, filters)
    direction = asc if order == SortOrder.asc else desc
    # id as tie breaker keeps pages stable when sort values repeat
    order_by = [direction(sort_column), direction(repository.model.id)]

    items = repository.find(criteria, order_by, offset=offset, limit=limit)
    total = repository.count(criteria)
    return items, describe_page(page, page_size, total)


def list_songs(
    songs: SongRepository,
    filters: CatalogFilters,
    sort_by: SongSortField = SongSortField.created_at,
    order: SortOrder = SortOrder.desc,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Tuple[List[Song], Pagination]:
    """
    One page of songs matching filters.

    Returns:
        Tuple of (songs, pagination)
    """
    sort_column = getattr(Song, SongSortField(sort_by).value)
    return _run(
        songs,
        filters,
        sort_column,
        SortOrder(order),
        page,
        page_size,
        MAX_SONG_PAGE_SIZE,
    )


def list_playlists(
    playlists: PlaylistRepository,
    filters: CatalogFilters,
    sort_by: PlaylistSortField = PlaylistSortField.created_at,
    order: SortOrder = SortOrder.desc,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Tuple[List[Playlist], Pagination]:
    """
    One page of playlists matching filters.

    Returns:
        Tuple of (playlists, pagination)
    """
    sort_column = getattr(Playlist, PlaylistSortField(sort_by).value)
    return _run(
        playlists,
        filters,
        sort_column,
        SortOrder(order),
        page,
        page_size,
        MAX_PLAYLIST_PAGE_SIZE,
    )
