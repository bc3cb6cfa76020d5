"""
Storage service for user files.

Composes the naming policy, the image transform and an ObjectStore:
- initialize(): make sure the bucket exists and is publicly readable
- upload(): derive key, resize if needed, write, return the public URL
- delete() / delete_by_prefix(): tear objects down again

The service keeps no record of what it stored. Keys are derived, never
looked up, so deleting a file only needs the inputs used to upload it.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from ...infrastructure.storage.client import ObjectStore, ObjectStoreError
from .errors import (
    StorageDeleteError,
    StorageFolderDeleteError,
    StorageProvisioningError,
    StorageUploadError,
)
from .images import ImageTransformError, transform
from .models import ObjectKey, StoredFile, UploadCategory
from .paths import (
    build_public_url,
    derive_key,
    normalize_filename,
    public_read_policy,
    select_metadata,
    tenant_prefix,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageServiceConfig:
    """Everything the service needs to know about its bucket."""
    bucket_name: str
    public_base_url: str
    skip_bucket_check: bool = False


class StorageService:
    """
    Upload, resize and delete user files in one bucket.

    initialize() must be awaited once before any upload or delete.
    """

    def __init__(self, config: StorageServiceConfig, store: ObjectStore) -> None:
        self._config = config
        self._store = store
        self._initialized = False

    @property
    def config(self) -> StorageServiceConfig:
        return self._config

    @property
    def initialized(self) -> bool:
        return self._initialized

    # ------------------------------------------------------------------
    # Provisioning
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """
        Ensure the bucket exists and carries the public-read policy.

        When skip_bucket_check is set nothing is verified; the operator is
        warned to make the category folders public by hand.

        Raises:
            StorageProvisioningError: if checking, creating or applying the
                policy to the bucket fails
        """
        if self._initialized:
            logger.debug("Storage service already initialized")
            return

        if self._config.skip_bucket_check:
            logger.warning("Skipping the verification of whether the storage bucket exists.")
            logger.warning(
                "Make sure that the following paths are publicly accessible: "
                "`/{pictures,previews,resumes}/*`"
            )
            self._initialized = True
            return

        bucket = self._config.bucket_name

        try:
            exists = await self._store.bucket_exists()
        except ObjectStoreError as e:
            raise StorageProvisioningError(
                "There was an error while checking if the storage bucket exists."
            ) from e

        if exists:
            logger.info("Successfully connected to the storage service.", extra={"bucket": bucket})
            self._initialized = True
            return

        try:
            await self._store.create_bucket()
        except ObjectStoreError as e:
            raise StorageProvisioningError(
                "There was an error while creating the storage bucket."
            ) from e

        try:
            await self._store.put_bucket_policy(public_read_policy(bucket))
        except ObjectStoreError as e:
            raise StorageProvisioningError(
                "There was an error while applying the policy to the storage bucket."
            ) from e

        logger.info(
            "A new storage bucket has been created and the policy has been applied successfully.",
            extra={"bucket": bucket}
        )
        self._initialized = True

    async def check_bucket(self) -> None:
        """
        Verify the bucket is still there.

        Raises:
            StorageProvisioningError: if the bucket is missing or unreachable
        """
        try:
            exists = await self._store.bucket_exists()
        except ObjectStoreError as e:
            raise StorageProvisioningError(
                "There was an error while checking if the storage bucket exists."
            ) from e

        if not exists:
            raise StorageProvisioningError(
                f"The storage bucket {self._config.bucket_name} does not exist."
            )

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("StorageService.initialize() must be awaited before use")

    # ------------------------------------------------------------------
    # Objects
    # ------------------------------------------------------------------

    def public_url(self, key: ObjectKey | str) -> str:
        return build_public_url(self._config.public_base_url, key)

    async def upload(
        self,
        tenant_id: str,
        category: UploadCategory,
        data: bytes,
        filename: Optional[str] = None,
    ) -> str:
        """Store a file and return its public URL. See store_file()."""
        stored = await self.store_file(tenant_id, category, data, filename)
        return stored.url

    async def store_file(
        self,
        tenant_id: str,
        category: UploadCategory,
        data: bytes,
        filename: Optional[str] = None,
    ) -> StoredFile:
        """
        Store a file and return its key and public URL.

        Any object already at the derived key is overwritten. Nothing is
        returned until the write has succeeded.

        Raises:
            ValueError: if tenant_id is not a plain [A-Za-z0-9_-] identifier
            StorageUploadError: if resizing or writing fails
        """
        self._require_initialized()

        key = derive_key(tenant_id, category, filename)
        metadata = select_metadata(category, key.filename)

        try:
            # Pillow work is CPU-bound, keep it off the event loop
            body = await asyncio.to_thread(transform, data, category)
            await self._store.put_object(
                key.path,
                body,
                content_type=metadata.content_type,
                content_disposition=metadata.content_disposition,
            )
        except (ObjectStoreError, ImageTransformError) as e:
            logger.error(
                "Failed to upload file",
                extra={"key": key.path, "error": str(e)}
            )
            raise StorageUploadError(key.path) from e

        logger.info(
            "Uploaded file",
            extra={
                "key": key.path,
                "category": category.value,
                "size_bytes": len(body),
            }
        )

        return StoredFile(key=key, url=self.public_url(key))

    async def delete(
        self,
        tenant_id: str,
        category: UploadCategory,
        filename: str,
    ) -> None:
        """
        Delete one file.

        The filename is normalized the same way as on upload, so passing the
        name used for the upload addresses the same object. Deleting an
        object that does not exist is a no-op.

        Raises:
            ValueError: if filename normalizes to nothing
            StorageDeleteError: if the store reports a failure
        """
        self._require_initialized()

        normalized = normalize_filename(filename)
        if not normalized:
            raise ValueError(f"Cannot derive an object key from filename {filename!r}")

        key = derive_key(tenant_id, category, normalized)

        try:
            await self._store.delete_object(key.path)
        except ObjectStoreError as e:
            logger.error(
                "Failed to delete file",
                extra={"key": key.path, "error": str(e)}
            )
            raise StorageDeleteError(key.path) from e

        logger.info("Deleted file", extra={"key": key.path})

    async def delete_by_prefix(self, prefix: str) -> int:
        """
        Delete every object whose key starts with prefix.

        Returns the number of objects removed; zero matches is fine.

        Raises:
            StorageFolderDeleteError: if listing or deleting fails
        """
        self._require_initialized()

        if not prefix:
            # an empty prefix would match the whole bucket
            raise ValueError("prefix must not be empty")

        try:
            keys = await self._store.list_keys(prefix)
            if keys:
                await self._store.delete_objects(keys)
        except ObjectStoreError as e:
            logger.error(
                "Failed to delete folder",
                extra={"prefix": prefix, "error": str(e)}
            )
            raise StorageFolderDeleteError(self._config.bucket_name, prefix) from e

        logger.info(
            "Deleted folder",
            extra={"prefix": prefix, "count": len(keys)}
        )
        return len(keys)

    async def delete_tenant(
        self,
        tenant_id: str,
        category: Optional[UploadCategory] = None,
    ) -> int:
        """Purge all of a tenant's files, or only those in one category."""
        return await self.delete_by_prefix(tenant_prefix(tenant_id, category))
