"""
Catalog configuration read from the environment.
"""

import os

# Upload limits
ALLOWED_AUDIO_TYPES = ("audio/mpeg", "audio/wav", "audio/mp3")
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(50 * 1024 * 1024)))

# Blob store calls that take longer than this are reported as unavailable
BLOB_STORE_TIMEOUT_SECONDS = float(os.getenv("BLOB_STORE_TIMEOUT_SECONDS", "30"))

# Pagination
DEFAULT_PAGE_SIZE = 20
MAX_SONG_PAGE_SIZE = 100
MAX_PLAYLIST_PAGE_SIZE = 50

# Optimistic playlist membership updates
MEMBERSHIP_UPDATE_ATTEMPTS = 5
