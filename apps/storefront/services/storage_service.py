"""
Object storage service for product images.

Talks to the hosted provider's S3-compatible storage endpoint through a
lazy-initialized boto3 client. Objects are served from the provider's public
bucket URL.
"""

import asyncio
import logging
import os
from typing import Optional
from urllib.parse import urlparse

from storefront.services.exceptions import StorageError

logger = logging.getLogger(__name__)

# Lazy-initialized S3 client
_s3_client = None


def _get_config():
    """Read storage configuration from environment at call time (not import time)."""
    supabase_url = os.getenv("SUPABASE_URL", "").rstrip("/")
    return {
        "endpoint_url": os.getenv(
            "STORAGE_ENDPOINT_URL", f"{supabase_url}/storage/v1/s3" if supabase_url else None
        ),
        "access_key_id": os.getenv("STORAGE_ACCESS_KEY_ID"),
        "secret_access_key": os.getenv("STORAGE_SECRET_ACCESS_KEY"),
        "region": os.getenv("STORAGE_REGION", "us-east-1"),
        "public_url": os.getenv(
            "STORAGE_PUBLIC_URL",
            f"{supabase_url}/storage/v1/object/public" if supabase_url else "",
        ).rstrip("/"),
    }


def _get_s3_client():
    """Get or create the boto3 S3 client. Lazy-imports boto3 to avoid import-time dependency."""
    global _s3_client
    if _s3_client is None:
        cfg = _get_config()
        if not all([cfg["endpoint_url"], cfg["access_key_id"], cfg["secret_access_key"]]):
            raise ValueError(
                "Storage environment variables not configured. "
                "Set SUPABASE_URL (or STORAGE_ENDPOINT_URL), STORAGE_ACCESS_KEY_ID, "
                "and STORAGE_SECRET_ACCESS_KEY."
            )
        import boto3

        _s3_client = boto3.client(
            "s3",
            endpoint_url=cfg["endpoint_url"],
            aws_access_key_id=cfg["access_key_id"],
            aws_secret_access_key=cfg["secret_access_key"],
            region_name=cfg["region"],
        )
    return _s3_client


def public_url(bucket: str, key: str) -> str:
    """Public URL of an object in a public bucket."""
    return f"{_get_config()['public_url']}/{bucket}/{key}"


async def upload_file(
    bucket: str, key: str, file_bytes: bytes, content_type: str = "application/octet-stream"
) -> str:
    """
    Upload file bytes to storage under the given key.

    Args:
        bucket: Storage bucket (e.g. "products")
        key: Object key (e.g. "product-1718000000000.jpg")
        file_bytes: Raw file content
        content_type: MIME type for the uploaded object

    Returns:
        Public URL of the uploaded file

    Raises:
        StorageError: If the upload fails
    """
    try:
        client = _get_s3_client()
        await asyncio.to_thread(
            client.put_object,
            Bucket=bucket,
            Key=key,
            Body=file_bytes,
            ContentType=content_type,
        )
    except Exception as e:
        logger.error("Failed to upload %s/%s: %s", bucket, key, e)
        raise StorageError(f"Upload of {key} failed") from e

    logger.info("Uploaded file to storage: %s/%s", bucket, key)
    return public_url(bucket, key)


async def delete_file(bucket: str, key: str) -> bool:
    """
    Delete a file from storage by its object key. Best-effort.

    Returns:
        True if deleted successfully, False otherwise
    """
    try:
        client = _get_s3_client()
        await asyncio.to_thread(client.delete_object, Bucket=bucket, Key=key)
        logger.info("Deleted file from storage: %s/%s", bucket, key)
        return True
    except Exception as e:
        logger.error("Failed to delete storage file %s/%s: %s", bucket, key, e)
        return False


async def delete_by_url(bucket: str, url: str) -> bool:
    """Delete the object behind a public URL. Best-effort."""
    key = key_from_public_url(url, bucket)
    if not key:
        logger.warning(f"Could not extract storage key from URL: {url}")
        return False
    return await delete_file(bucket, key)


def key_from_public_url(url: str, bucket: str) -> Optional[str]:
    """
    Extract the object key from a public object URL.

    Handles URLs like:
      https://<project>.supabase.co/storage/v1/object/public/products/product-1.jpg

    Args:
        url: Public object URL
        bucket: Bucket the object must belong to

    Returns:
        Object key or None if the URL does not point into ``bucket``
    """
    try:
        path = urlparse(url).path
    except Exception:
        return None

    marker = f"/{bucket}/"
    if marker not in path:
        return None
    key = path.split(marker, 1)[1]
    return key if key else None
