"""
Main application initialization and configuration.
"""

import logging

from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text

from app.core.errors import CatalogError
from app.dependencies import db_dependency
from app.api.routes import songs, playlists

logger = logging.getLogger(__name__)

# Initialize FastAPI application
app = FastAPI(title="Music Catalog API")

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["https://localhost", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(songs.router)
app.include_router(playlists.router)


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
    """Translate catalog errors into JSON error responses."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/")
def read_root():
    """Return a welcome message at the root endpoint."""
    return {"message": "Welcome to Music Catalog API"}


@app.get("/api")
@app.get("/api/")
def read_api_root():
    """Return a message with available API endpoints."""
    return {
        "message": (
            "Music Catalog API - Available endpoints: "
            "/api/songs/*, /api/playlists/*"
        )
    }


@app.get("/api/health")
async def health_check():
    """Health check endpoint to verify the API is running."""
    return {"status": "healthy", "services": {"api": "online"}}


@app.get("/api/db-test")
def db_test(db: Session = Depends(db_dependency)):
    """Test the database connection."""
    try:
        db.execute(text("SELECT 1"))
        return {"status": "Database connection successful!"}
    except Exception as e:
        return {"status": "Database connection failed", "error": str(e)}
