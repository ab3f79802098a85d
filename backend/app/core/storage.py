"""
Object storage client configuration for the blob store gateway.
"""

import os
import logging
from typing import Optional

import boto3

from app.services.storage.blob_store import BlobStoreGateway

logger = logging.getLogger(__name__)

# S3 settings from environment
S3_BUCKET_NAME = os.getenv("S3_BUCKET_NAME", "music-catalog")
AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
S3_ENDPOINT_URL = os.getenv("S3_ENDPOINT_URL")

# Global gateway instance, one client reused across requests
_blob_store: Optional[BlobStoreGateway] = None


def create_s3_client():
    """
    Build a boto3 S3 client from the environment.

    Credentials are resolved by boto3's default chain
    (AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY, profile, instance role).
    """
    return boto3.client(
        "s3",
        region_name=AWS_REGION,
        endpoint_url=S3_ENDPOINT_URL,
    )


def get_blob_store() -> BlobStoreGateway:
    """
    Returns the shared blob store gateway.

    Creates the S3 client on first use.
    """
    global _blob_store

    if _blob_store is None:
        _blob_store = BlobStoreGateway(
            client=create_s3_client(),
            bucket=S3_BUCKET_NAME,
            region=AWS_REGION,
            endpoint_url=S3_ENDPOINT_URL,
        )
        logger.info(f"Blob store gateway configured for bucket {S3_BUCKET_NAME}")

    return _blob_store


def reset_blob_store():
    """Drop the shared gateway so the next call rebuilds it."""
    global _blob_store
    _blob_store = None
