"""
Read and ownership policy shared by songs and playlists.
"""

import uuid
from typing import Any, Optional

from app.core.errors import Forbidden


def is_owner(entity: Any, requester_id: Optional[uuid.UUID]) -> bool:
    return requester_id is not None and str(entity.user_id) == str(requester_id)


def can_read(entity: Any, requester_id: Optional[uuid.UUID]) -> bool:
    """Public entities are readable by anyone, private ones only by their owner."""
    return bool(entity.is_public) or is_owner(entity, requester_id)


def ensure_readable(entity: Any, requester_id: Optional[uuid.UUID]) -> None:
    if not can_read(entity, requester_id):
        raise Forbidden("Access denied")


def ensure_owner(entity: Any, requester_id: Optional[uuid.UUID], message: str) -> None:
    if not is_owner(entity, requester_id):
        raise Forbidden(message)
