"""
Metadata repository for songs and playlists.

Repositories own the SQLAlchemy session work: every write commits on its
own, failed statements roll the session back, and driver errors surface as
RepositoryUnavailable.
"""

import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import func, literal_column, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import Conflict, InvalidInput, RepositoryUnavailable
from app.db.models import Playlist, Song

logger = logging.getLogger(__name__)

# SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


def is_unique_violation(error: IntegrityError) -> bool:
    """True if error comes from a unique constraint rather than NOT NULL or CHECK."""
    orig = getattr(error, "orig", None)
    if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION:
        return True
    return "unique" in str(orig).lower()


class BaseRepository:
    """CRUD and query helpers shared by the song and playlist repositories."""

    model: Any = None
    search_fields: Sequence[str] = ()
    editable_fields: Sequence[str] = ()

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, action: str, error: SQLAlchemyError):
        self.db.rollback()
        name = self.model.__name__
        if isinstance(error, IntegrityError):
            logger.warning(f"{name} {action} violated a constraint: {error}")
            if is_unique_violation(error):
                raise Conflict(f"{name} conflicts with an existing record") from error
            raise InvalidInput(f"{name} has a missing or invalid field") from error
        logger.error(f"{name} {action} failed: {error}")
        raise RepositoryUnavailable(f"Could not {action} {name.lower()}") from error

    def create(self, **fields):
        """
        Insert a new record.

        Raises:
            InvalidInput: If a model validator rejects a field
            Conflict: If a unique constraint is violated
            RepositoryUnavailable: If the store fails
        """
        record = self.model(**fields)
        try:
            self.db.add(record)
            self.db.flush()
            record_id = record.id
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail("create", e)

        # Committed from here on; a failed reload must not look like a failed save
        self._reload(record, record_id)
        logger.info(f"Created {self.model.__name__} {record_id}")
        return record

    def _reload(self, record, record_id) -> None:
        try:
            self.db.refresh(record)
        except SQLAlchemyError as e:
            logger.warning(
                f"Reloading {self.model.__name__} {record_id} failed after "
                f"commit, it will load on next access: {e}"
            )

    def get(self, record_id: uuid.UUID):
        try:
            return self.db.get(self.model, record_id)
        except SQLAlchemyError as e:
            self._fail("load", e)

    def find(
        self,
        criteria: Iterable = (),
        order_by: Iterable = (),
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List:
        """Records matching all criteria, ordered and sliced."""
        statement = select(self.model).where(*criteria).order_by(*order_by)
        if offset:
            statement = statement.offset(offset)
        if limit is not None:
            statement = statement.limit(limit)
        try:
            return list(self.db.scalars(statement).all())
        except SQLAlchemyError as e:
            self._fail("query", e)

    def count(self, criteria: Iterable = ()) -> int:
        statement = select(func.count()).select_from(self.model).where(*criteria)
        try:
            return self.db.scalar(statement) or 0
        except SQLAlchemyError as e:
            self._fail("count", e)

    def update(self, record, changes: Dict[str, Any]):
        """
        Apply metadata edits to a loaded record.

        Only fields listed in editable_fields are touched; anything else in
        changes is ignored.
        """
        try:
            for field, value in changes.items():
                if field in self.editable_fields:
                    setattr(record, field, value)
        except InvalidInput:
            self.db.rollback()
            raise
        record_id = record.id
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail("update", e)

        self._reload(record, record_id)
        return record

    def delete(self, record_id: uuid.UUID) -> bool:
        """Delete a record by id. Returns False if nothing was deleted."""
        try:
            record = self.db.get(self.model, record_id)
            if record is None:
                return False
            self.db.delete(record)
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail("delete", e)

        logger.info(f"Deleted {self.model.__name__} {record_id}")
        return True

    def text_search(self, term: str):
        """
        Predicate matching term against search_fields.

        PostgreSQL uses its full-text index; other dialects fall back to a
        case-insensitive substring match on any field.
        """
        columns = [getattr(self.model, name) for name in self.search_fields]
        if self.db.get_bind().dialect.name == "postgresql":
            # Same expression as the GIN index in the migration. Constants are
            # inlined; as bound parameters the planner cannot match the index.
            config = literal_column("'english'")
            empty, separator = literal_column("''"), literal_column("' '")
            text = func.coalesce(columns[0], empty)
            for column in columns[1:]:
                text = text.concat(separator).concat(func.coalesce(column, empty))
            document = func.to_tsvector(config, text)
            return document.op("@@")(func.plainto_tsquery(config, term))
        needle = term.lower()
        return or_(
            *[
                func.lower(column).contains(needle, autoescape=True)
                for column in columns
            ]
        )


class SongRepository(BaseRepository):
    model = Song
    search_fields = ("title", "artist", "album")
    editable_fields = ("title", "artist", "album", "genre", "is_public")

    def get_many(self, song_ids: Iterable) -> Dict[str, Song]:
        """Existing songs among song_ids, keyed by string id."""
        ids = [uuid.UUID(str(song_id)) for song_id in song_ids]
        if not ids:
            return {}
        songs = self.find([Song.id.in_(ids)])
        return {str(song.id): song for song in songs}

    def increment_play_count(self, song_id: uuid.UUID) -> Optional[int]:
        """
        Add one play in the store and return the new count.

        The increment is a single UPDATE evaluated by the database, so
        concurrent plays are never lost. The count is read back inside the
        same transaction. Returns None if the song does not exist.
        """
        statement = (
            update(Song)
            .where(Song.id == song_id)
            .values(play_count=Song.play_count + 1)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(statement)
            if result.rowcount == 0:
                self.db.rollback()
                return None
            play_count = self.db.scalar(
                select(Song.play_count).where(Song.id == song_id)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail("increment play count of", e)

        return play_count


class PlaylistRepository(BaseRepository):
    model = Playlist
    search_fields = ("name", "description")
    editable_fields = ("name", "description", "is_public", "cover_image")

    def replace_song_ids(
        self, playlist_id: uuid.UUID, expected_revision: int, song_ids: List[str]
    ) -> bool:
        """
        Compare-and-set the playlist's song sequence.

        The write only happens if the stored revision still equals
        expected_revision. Returns False when another writer got there first.
        """
        statement = (
            update(Playlist)
            .where(Playlist.id == playlist_id, Playlist.revision == expected_revision)
            .values(song_ids=list(song_ids), revision=expected_revision + 1)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(statement)
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail("update songs of", e)

        if result.rowcount == 0:
            logger.info(
                f"Playlist {playlist_id} changed since revision {expected_revision}"
            )
            return False
        return True
