"""
Gateway to the object storage holding the audio bytes.

The gateway only moves bytes. Which media types are acceptable is decided by
the upload coordinator before anything reaches this module.
"""

import asyncio
import logging
import os
import time
import uuid
from typing import Any, Dict, Optional
from urllib.parse import quote

from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import BLOB_STORE_TIMEOUT_SECONDS
from app.core.errors import StorageUnavailable
from app.schemas.catalog import BlobLocation

logger = logging.getLogger(__name__)

KEY_PREFIX = "music"


def generate_content_key(owner_id: Any, filename: Optional[str] = None) -> str:
    """
    Build a blob key that is unique across concurrent uploads.

    The key is scoped by owner and combines a nanosecond timestamp with a
    128-bit random component, keeping the original file extension.
    """
    extension = os.path.splitext(filename or "")[1].lower()
    return f"{KEY_PREFIX}/{owner_id}/{time.time_ns()}-{uuid.uuid4().hex}{extension}"


class BlobStoreGateway:
    """Put and delete binary objects in an S3 bucket."""

    def __init__(
        self,
        client: Any,
        bucket: str,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        timeout: float = BLOB_STORE_TIMEOUT_SECONDS,
    ):
        self.client = client
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        self.timeout = timeout

    def location_for(self, key: str) -> str:
        """Public URL of an object in the bucket."""
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        if self.region:
            return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    async def _call(self, operation: str, key: str, **kwargs) -> Dict[str, Any]:
        """Run a blocking client call in a worker thread under the timeout."""
        method = getattr(self.client, operation)
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(method, Bucket=self.bucket, Key=key, **kwargs),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Blob store {operation} timed out for {key}")
            raise StorageUnavailable(
                f"Blob store did not answer within {self.timeout}s"
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Blob store {operation} failed for {key}: {e}")
            raise StorageUnavailable(f"Blob store {operation} failed") from e
        except Exception as e:
            logger.exception(f"Unexpected blob store error on {operation} for {key}")
            raise StorageUnavailable(f"Blob store {operation} failed") from e

    async def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> BlobLocation:
        """
        Store bytes under key.

        Args:
            key: Object key, usually from generate_content_key
            data: Object body
            content_type: MIME type stored with the object
            metadata: Attributes attached to the object itself

        Returns:
            Location of the stored object

        Raises:
            StorageUnavailable: If the write failed or timed out
        """
        # S3 user metadata must be ASCII
        attached = {name: quote(str(value)) for name, value in (metadata or {}).items()}

        await self._call(
            "put_object",
            key,
            Body=data,
            ContentType=content_type,
            Metadata=attached,
        )

        logger.info(f"Stored blob {key} ({len(data)} bytes)")
        return BlobLocation(key=key, url=self.location_for(key), size=len(data))

    async def delete(self, key: str) -> None:
        """
        Delete the object stored under key.

        Raises:
            StorageUnavailable: If the delete failed or timed out
        """
        await self._call("delete_object", key)
        logger.info(f"Deleted blob {key}")
