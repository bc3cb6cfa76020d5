"""
Object store client for user files.

Talks to any S3-compatible store (AWS S3, Cloudflare R2, MinIO) through boto3,
with a mock mode that keeps objects in memory for local development.

This layer only knows buckets, keys and bytes. Naming, resizing and the
public-access policy live in core.storage.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

# S3 DeleteObjects accepts at most this many keys per request
DELETE_BATCH_SIZE = 1000

_MISSING_CODES = {"404", "NoSuchKey", "NoSuchBucket", "NotFound"}


class ObjectStoreError(Exception):
    """Raised when a call into the object store fails."""
    pass


@dataclass
class S3Config:
    """
    Connection settings for an S3-compatible store.

    endpoint_url is left empty for AWS itself and set for MinIO or R2.
    """
    access_key_id: str
    secret_access_key: str
    bucket_name: str
    endpoint_url: Optional[str] = None
    region: str = "us-east-1"


@dataclass
class StoredObject:
    """An object held by the mock store."""
    data: bytes
    content_type: str
    content_disposition: Optional[str] = None


class ObjectStore(Protocol):
    """
    Protocol for the bucket and object operations the service needs.

    Tests provide fakes and the app swaps between S3 and the in-memory
    store without touching the service.
    """

    bucket_name: str

    async def bucket_exists(self) -> bool:
        """Return True if the configured bucket exists."""
        ...

    async def create_bucket(self) -> None:
        """Create the configured bucket."""
        ...

    async def put_bucket_policy(self, policy: dict[str, Any]) -> None:
        """Attach a bucket policy document."""
        ...

    async def put_object(
        self,
        key: str,
        data: bytes,
        content_type: str,
        content_disposition: Optional[str] = None,
    ) -> None:
        """Write an object, replacing any existing object at the key."""
        ...

    async def list_keys(self, prefix: str) -> list[str]:
        """List every key starting with prefix."""
        ...

    async def delete_object(self, key: str) -> None:
        """Delete one object. Missing objects are not an error."""
        ...

    async def delete_objects(self, keys: list[str]) -> None:
        """Delete many objects."""
        ...


def _is_missing(error: ClientError) -> bool:
    code = str(error.response.get("Error", {}).get("Code", ""))
    return code in _MISSING_CODES


class S3ObjectStore:
    """
    S3-compatible object store backed by boto3.

    Methods are async to match the Protocol even though boto3 is
    synchronous; the HTTP layer awaits them like any other I/O.
    """

    def __init__(self, config: S3Config, client: Any = None) -> None:
        """
        Initialize the boto3 S3 client.

        Args:
            config: Connection settings
            client: Pre-built boto3 S3 client (tests pass a stubbed one)
        """
        self._config = config
        self.bucket_name = config.bucket_name

        if client is None:
            import boto3
            from botocore.config import Config

            # path-style addressing keeps MinIO and R2 happy
            boto_config = Config(
                signature_version="s3v4",
                s3={"addressing_style": "path"},
            )
            client = boto3.client(
                "s3",
                endpoint_url=config.endpoint_url,
                aws_access_key_id=config.access_key_id,
                aws_secret_access_key=config.secret_access_key,
                region_name=config.region,
                config=boto_config,
            )

        self._s3_client = client

        logger.info(
            "Initialized S3 object store",
            extra={
                "bucket": config.bucket_name,
                "endpoint": config.endpoint_url,
            }
        )

    async def bucket_exists(self) -> bool:
        try:
            self._s3_client.head_bucket(Bucket=self.bucket_name)
            return True
        except ClientError as e:
            if _is_missing(e):
                return False
            raise ObjectStoreError(f"Bucket check failed: {e}") from e
        except BotoCoreError as e:
            raise ObjectStoreError(f"Bucket check failed: {e}") from e

    async def create_bucket(self) -> None:
        params: dict[str, Any] = {"Bucket": self.bucket_name}
        # us-east-1 rejects an explicit location constraint
        if self._config.region not in ("us-east-1", "auto"):
            params["CreateBucketConfiguration"] = {
                "LocationConstraint": self._config.region,
            }

        try:
            self._s3_client.create_bucket(**params)
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(f"Bucket creation failed: {e}") from e

        logger.info("Created bucket", extra={"bucket": self.bucket_name})

    async def put_bucket_policy(self, policy: dict[str, Any]) -> None:
        try:
            self._s3_client.put_bucket_policy(
                Bucket=self.bucket_name,
                Policy=json.dumps(policy),
            )
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(f"Setting bucket policy failed: {e}") from e

    async def put_object(
        self,
        key: str,
        data: bytes,
        content_type: str,
        content_disposition: Optional[str] = None,
    ) -> None:
        params: dict[str, Any] = {
            "Bucket": self.bucket_name,
            "Key": key,
            "Body": data,
            "ContentType": content_type,
        }
        if content_disposition:
            params["ContentDisposition"] = content_disposition

        try:
            self._s3_client.put_object(**params)
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to put object",
                extra={"key": key, "error": str(e)}
            )
            raise ObjectStoreError(f"Upload failed: {e}") from e

        logger.debug(
            "Put object",
            extra={"key": key, "size_bytes": len(data)}
        )

    async def list_keys(self, prefix: str) -> list[str]:
        """List keys under prefix, following continuation tokens."""
        keys: list[str] = []

        try:
            paginator = self._s3_client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
                keys.extend(obj["Key"] for obj in page.get("Contents", []))
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(f"Listing failed: {e}") from e

        return keys

    async def delete_object(self, key: str) -> None:
        try:
            self._s3_client.delete_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            if _is_missing(e):
                logger.debug("Object already absent", extra={"key": key})
                return
            raise ObjectStoreError(f"Delete failed: {e}") from e
        except BotoCoreError as e:
            raise ObjectStoreError(f"Delete failed: {e}") from e

    async def delete_objects(self, keys: list[str]) -> None:
        for start in range(0, len(keys), DELETE_BATCH_SIZE):
            batch = keys[start:start + DELETE_BATCH_SIZE]
            try:
                response = self._s3_client.delete_objects(
                    Bucket=self.bucket_name,
                    Delete={
                        "Objects": [{"Key": key} for key in batch],
                        "Quiet": True,
                    },
                )
            except (ClientError, BotoCoreError) as e:
                raise ObjectStoreError(f"Batch delete failed: {e}") from e

            errors = [
                err for err in response.get("Errors", [])
                if err.get("Code") not in _MISSING_CODES
            ]
            if errors:
                raise ObjectStoreError(
                    f"Batch delete failed for {len(errors)} objects, "
                    f"first: {errors[0].get('Key')} ({errors[0].get('Code')})"
                )


# ---------------------------------------------------------------------------
# Mock Store for Local Development
# ---------------------------------------------------------------------------

class MockObjectStore:
    """
    In-memory object store for local development and tests.

    Objects live in a dict keyed by object key. The bucket starts out
    missing so provisioning behaves as it would against a fresh store.
    """

    def __init__(self, bucket_name: str = "mock-bucket", bucket_exists: bool = False) -> None:
        self.bucket_name = bucket_name
        self.objects: dict[str, StoredObject] = {}
        self.policy: Optional[dict[str, Any]] = None
        self._bucket_exists = bucket_exists
        logger.info("Initialized mock object store (in-memory)")

    async def bucket_exists(self) -> bool:
        return self._bucket_exists

    async def create_bucket(self) -> None:
        self._bucket_exists = True

    async def put_bucket_policy(self, policy: dict[str, Any]) -> None:
        self.policy = policy

    async def put_object(
        self,
        key: str,
        data: bytes,
        content_type: str,
        content_disposition: Optional[str] = None,
    ) -> None:
        self.objects[key] = StoredObject(
            data=data,
            content_type=content_type,
            content_disposition=content_disposition,
        )
        logger.debug(
            "Stored object in mock store",
            extra={"key": key, "size_bytes": len(data)}
        )

    async def list_keys(self, prefix: str) -> list[str]:
        return [key for key in self.objects if key.startswith(prefix)]

    async def delete_object(self, key: str) -> None:
        self.objects.pop(key, None)

    async def delete_objects(self, keys: list[str]) -> None:
        for key in keys:
            self.objects.pop(key, None)


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_object_store(
    config: Optional[S3Config] = None,
    mock_mode: bool = False,
) -> ObjectStore:
    """
    Create an object store based on configuration.

    Args:
        config: S3 configuration (required if not mock_mode)
        mock_mode: If True, return the in-memory store

    Returns:
        ObjectStore implementation (S3 or Mock)
    """
    if mock_mode:
        bucket_name = config.bucket_name if config else "mock-bucket"
        return MockObjectStore(bucket_name=bucket_name)

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return S3ObjectStore(config)
