"""
Shared fixtures for the storage tests.

Everything runs against the in-memory store or a stubbed boto3 client;
no test touches the network.
"""

import io

import pytest
from PIL import Image

from resume_storage.core.storage import StorageService, StorageServiceConfig
from resume_storage.infrastructure.storage.client import MockObjectStore, ObjectStoreError

BASE_URL = "https://storage.example.com/resume-bucket"
BUCKET = "resume-bucket"


def make_jpeg(width: int, height: int, color: str = "steelblue") -> bytes:
    """Encode a solid-colour JPEG of the given size."""
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="JPEG")
    return buf.getvalue()


def make_png(width: int, height: int) -> bytes:
    """Encode a transparent PNG of the given size."""
    buf = io.BytesIO()
    Image.new("RGBA", (width, height), (255, 0, 0, 128)).save(buf, format="PNG")
    return buf.getvalue()


class FailingObjectStore:
    """Store whose every call fails, as an unreachable store would."""

    bucket_name = BUCKET

    async def bucket_exists(self) -> bool:
        raise ObjectStoreError("connection refused")

    async def create_bucket(self) -> None:
        raise ObjectStoreError("connection refused")

    async def put_bucket_policy(self, policy) -> None:
        raise ObjectStoreError("connection refused")

    async def put_object(self, key, data, content_type, content_disposition=None) -> None:
        raise ObjectStoreError("connection refused")

    async def list_keys(self, prefix):
        raise ObjectStoreError("connection refused")

    async def delete_object(self, key) -> None:
        raise ObjectStoreError("connection refused")

    async def delete_objects(self, keys) -> None:
        raise ObjectStoreError("connection refused")


@pytest.fixture
def service_config() -> StorageServiceConfig:
    return StorageServiceConfig(bucket_name=BUCKET, public_base_url=BASE_URL)


@pytest.fixture
def mock_store() -> MockObjectStore:
    return MockObjectStore(bucket_name=BUCKET)


@pytest.fixture
async def storage_service(service_config, mock_store) -> StorageService:
    """Initialized service backed by the in-memory store."""
    service = StorageService(service_config, mock_store)
    await service.initialize()
    return service


@pytest.fixture
def failing_store() -> FailingObjectStore:
    return FailingObjectStore()


@pytest.fixture
def jpeg_factory():
    return make_jpeg


@pytest.fixture
def png_factory():
    return make_png
