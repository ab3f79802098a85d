"""
Test configuration and fixtures for pytest.
"""

import os

# Point the module-level engine at SQLite before the app is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["TESTING"] = "True"

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from app.core.security import create_access_token
from app.db.base import Base
from app.db.models import Playlist, Song
from app.db.repositories import PlaylistRepository, SongRepository
from app.dependencies import blob_store_dependency, db_dependency
from app.main import app
from app.schemas.catalog import BlobLocation
from app.services.storage.blob_store import BlobStoreGateway


@pytest.fixture(scope="function")
def test_engine():
    """Create a fresh in-memory database for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(test_engine):
    """Create a new database session for a test."""
    session_factory = sessionmaker(bind=test_engine, autoflush=False)
    session = session_factory()

    yield session

    session.close()


@pytest.fixture
def blob_store():
    """
    In-memory stand-in for the blob store gateway.

    Stored objects are kept in blob_store.objects so tests can check which
    blobs exist.
    """
    store = MagicMock(spec=BlobStoreGateway)
    store.objects = {}

    async def put(key, data, content_type, metadata=None):
        store.objects[key] = data
        return BlobLocation(
            key=key, url=f"https://bucket.example.com/{key}", size=len(data)
        )

    async def delete(key):
        store.objects.pop(key, None)

    store.put = AsyncMock(side_effect=put)
    store.delete = AsyncMock(side_effect=delete)
    return store


@pytest.fixture
def client(db_session, blob_store):
    """Create a test client with session and blob store overrides."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[db_dependency] = override_get_db
    app.dependency_overrides[blob_store_dependency] = lambda: blob_store

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def song_repository(db_session):
    return SongRepository(db_session)


@pytest.fixture
def playlist_repository(db_session):
    return PlaylistRepository(db_session)


@pytest.fixture
def owner_id():
    return uuid.uuid4()


@pytest.fixture
def other_user_id():
    return uuid.uuid4()


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a user id."""

    def build(user_id):
        token = create_access_token({"sub": str(user_id)})
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest.fixture
def make_song(db_session):
    """Insert a song record directly, bypassing the blob store."""

    def build(user_id, **overrides):
        key = f"music/{user_id}/{uuid.uuid4().hex}.mp3"
        fields = {
            "title": "Test Song",
            "artist": "Test Artist",
            "duration": 180,
            "blob_url": f"https://bucket.example.com/{key}",
            "blob_key": key,
            "file_size": 1024,
            "mime_type": "audio/mpeg",
            "user_id": user_id,
            "is_public": True,
        }
        fields.update(overrides)
        song = Song(**fields)
        db_session.add(song)
        db_session.commit()
        db_session.refresh(song)
        return song

    return build


@pytest.fixture
def make_playlist(db_session):
    """Insert a playlist record directly."""

    def build(user_id, **overrides):
        fields = {
            "name": "Test Playlist",
            "user_id": user_id,
            "song_ids": [],
            "is_public": False,
        }
        fields.update(overrides)
        playlist = Playlist(**fields)
        db_session.add(playlist)
        db_session.commit()
        db_session.refresh(playlist)
        return playlist

    return build


# Reset test environment at the end of session
def pytest_sessionfinish(session, exitstatus):
    """Clean up after all tests have run."""
    os.environ.pop("TESTING", None)


# Alias for compatibility
@pytest.fixture
def db(db_session):
    """Alias for db_session."""
    return db_session
