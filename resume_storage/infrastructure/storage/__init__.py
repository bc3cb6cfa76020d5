"""
Object storage integration for user files.

Supports S3, R2 and MinIO via the S3-compatible API.
Includes mock mode for local development without credentials.
"""

from .client import (
    MockObjectStore,
    ObjectStore,
    ObjectStoreError,
    S3Config,
    S3ObjectStore,
    StoredObject,
    create_object_store,
)

__all__ = [
    "MockObjectStore",
    "ObjectStore",
    "ObjectStoreError",
    "S3Config",
    "S3ObjectStore",
    "StoredObject",
    "create_object_store",
]
