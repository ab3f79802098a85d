"""
Error taxonomy for the catalog core.

Every failure the services raise is a CatalogError subclass so the routing
layer can translate it with a single handler.
"""

from typing import Optional


class CatalogError(Exception):
    """Base class for catalog errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(CatalogError):
    """Malformed or out-of-range input, rejected before any side effect."""

    status_code = 400


class UnsupportedMediaType(CatalogError):
    """Declared media type is not on the audio allow-list."""

    status_code = 415


class NotFound(CatalogError):
    """The requested entity does not exist."""

    status_code = 404


class Forbidden(CatalogError):
    """Ownership or visibility check failed."""

    status_code = 403


class Conflict(CatalogError):
    """Duplicate playlist membership or a lost concurrent update."""

    status_code = 409


class StorageUnavailable(CatalogError):
    """The blob store failed or did not answer in time."""

    status_code = 503


class RepositoryUnavailable(CatalogError):
    """The metadata store failed."""

    status_code = 503


class OrphanedBlob(CatalogError):
    """
    A blob was left without a metadata record.

    Never raised to callers; it is built and logged when a compensating or
    cleanup delete fails.
    """

    def __init__(
        self, blob_key: str, reason: str, cause: Optional[BaseException] = None
    ):
        super().__init__(f"Orphaned blob {blob_key}: {reason}")
        self.blob_key = blob_key
        self.reason = reason
        self.cause = cause
