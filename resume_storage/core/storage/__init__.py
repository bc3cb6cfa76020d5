"""
Storage domain: naming policy, image transform and the storage service.

Exports the main types used across the application.
"""

from .errors import (
    StorageDeleteError,
    StorageError,
    StorageFolderDeleteError,
    StorageProvisioningError,
    StorageUploadError,
)
from .images import MAX_IMAGE_SIZE, ImageTransformError, resize_image, transform
from .models import ObjectKey, ObjectMetadata, StoredFile, UploadCategory
from .paths import (
    build_public_url,
    derive_key,
    normalize_filename,
    public_read_policy,
    select_metadata,
    tenant_prefix,
)
from .service import StorageService, StorageServiceConfig

__all__ = [
    "ImageTransformError",
    "MAX_IMAGE_SIZE",
    "ObjectKey",
    "ObjectMetadata",
    "StorageDeleteError",
    "StorageError",
    "StorageFolderDeleteError",
    "StorageProvisioningError",
    "StorageService",
    "StorageServiceConfig",
    "StorageUploadError",
    "StoredFile",
    "UploadCategory",
    "build_public_url",
    "derive_key",
    "normalize_filename",
    "public_read_policy",
    "resize_image",
    "select_metadata",
    "tenant_prefix",
    "transform",
]
