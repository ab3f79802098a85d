"""
Database engine and session factory.
"""

import os

import sqlalchemy
from sqlalchemy import orm

DATABASE_URL = os.getenv(
    "DATABASE_URL", "postgresql://postgres:postgres@db:5432/music_catalog"
)

engine = sqlalchemy.create_engine(DATABASE_URL, pool_pre_ping=True)

SessionLocal = orm.sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """
    Yield a database session for one request.

    The session is closed when the request finishes, even on error.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
