"""
Unit tests for the object store clients.

The S3 store is exercised against a real boto3 client wrapped in
botocore's Stubber, so request parameters are validated against the S3
model without any network traffic.
"""

import json

import boto3
import pytest
from botocore.stub import Stubber

from resume_storage.infrastructure.storage.client import (
    DELETE_BATCH_SIZE,
    MockObjectStore,
    ObjectStoreError,
    S3Config,
    S3ObjectStore,
    create_object_store,
)

BUCKET = "resume-bucket"


@pytest.fixture
def s3_client():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def stubber(s3_client):
    with Stubber(s3_client) as stub:
        yield stub
        stub.assert_no_pending_responses()


@pytest.fixture
def store(s3_client) -> S3ObjectStore:
    config = S3Config(
        access_key_id="testing",
        secret_access_key="testing",
        bucket_name=BUCKET,
    )
    return S3ObjectStore(config, client=s3_client)


# ---------------------------------------------------------------------------
# S3 Store
# ---------------------------------------------------------------------------

class TestS3Bucket:
    """Tests for bucket-level calls."""

    async def test_bucket_exists(self, store, stubber):
        stubber.add_response("head_bucket", {}, {"Bucket": BUCKET})
        assert await store.bucket_exists() is True

    async def test_bucket_missing(self, store, stubber):
        stubber.add_client_error(
            "head_bucket",
            service_error_code="404",
            http_status_code=404,
            expected_params={"Bucket": BUCKET},
        )
        assert await store.bucket_exists() is False

    async def test_bucket_check_forbidden_raises(self, store, stubber):
        stubber.add_client_error("head_bucket", service_error_code="403", http_status_code=403)

        with pytest.raises(ObjectStoreError, match="Bucket check failed"):
            await store.bucket_exists()

    async def test_create_bucket_in_default_region(self, store, stubber):
        stubber.add_response("create_bucket", {"Location": f"/{BUCKET}"}, {"Bucket": BUCKET})
        await store.create_bucket()

    async def test_create_bucket_elsewhere_sets_location(self, s3_client, stubber):
        config = S3Config("testing", "testing", BUCKET, region="eu-west-1")
        store = S3ObjectStore(config, client=s3_client)
        stubber.add_response(
            "create_bucket",
            {"Location": f"/{BUCKET}"},
            {
                "Bucket": BUCKET,
                "CreateBucketConfiguration": {"LocationConstraint": "eu-west-1"},
            },
        )
        await store.create_bucket()

    async def test_put_bucket_policy_serializes_json(self, store, stubber):
        policy = {"Version": "2012-10-17", "Statement": []}
        stubber.add_response(
            "put_bucket_policy",
            {},
            {"Bucket": BUCKET, "Policy": json.dumps(policy)},
        )
        await store.put_bucket_policy(policy)


class TestS3Objects:
    """Tests for object-level calls."""

    async def test_put_pdf_sets_disposition(self, store, stubber):
        stubber.add_response(
            "put_object",
            {"ETag": '"abc"'},
            {
                "Bucket": BUCKET,
                "Key": "user123/resumes/cv.pdf",
                "Body": b"%PDF",
                "ContentType": "application/pdf",
                "ContentDisposition": "attachment; filename=cv.pdf",
            },
        )
        await store.put_object(
            "user123/resumes/cv.pdf",
            b"%PDF",
            content_type="application/pdf",
            content_disposition="attachment; filename=cv.pdf",
        )

    async def test_put_image_omits_disposition(self, store, stubber):
        stubber.add_response(
            "put_object",
            {"ETag": '"abc"'},
            {
                "Bucket": BUCKET,
                "Key": "user123/pictures/me.jpg",
                "Body": b"jpeg",
                "ContentType": "image/jpeg",
            },
        )
        await store.put_object("user123/pictures/me.jpg", b"jpeg", content_type="image/jpeg")

    async def test_put_failure_raises(self, store, stubber):
        stubber.add_client_error("put_object", service_error_code="AccessDenied", http_status_code=403)

        with pytest.raises(ObjectStoreError, match="Upload failed"):
            await store.put_object("k", b"x", content_type="image/jpeg")

    async def test_list_keys_follows_pages(self, store, stubber):
        stubber.add_response(
            "list_objects_v2",
            {
                "Contents": [{"Key": "user123/resumes/a.pdf"}],
                "IsTruncated": True,
                "NextContinuationToken": "page-2",
            },
            {"Bucket": BUCKET, "Prefix": "user123/"},
        )
        stubber.add_response(
            "list_objects_v2",
            {
                "Contents": [{"Key": "user123/pictures/b.jpg"}],
                "IsTruncated": False,
            },
            {"Bucket": BUCKET, "Prefix": "user123/", "ContinuationToken": "page-2"},
        )

        keys = await store.list_keys("user123/")

        assert keys == ["user123/resumes/a.pdf", "user123/pictures/b.jpg"]

    async def test_list_keys_empty(self, store, stubber):
        stubber.add_response(
            "list_objects_v2",
            {"IsTruncated": False, "KeyCount": 0},
            {"Bucket": BUCKET, "Prefix": "nobody/"},
        )
        assert await store.list_keys("nobody/") == []

    async def test_delete_object(self, store, stubber):
        stubber.add_response("delete_object", {}, {"Bucket": BUCKET, "Key": "a/b/c.pdf"})
        await store.delete_object("a/b/c.pdf")

    async def test_delete_missing_object_is_noop(self, store, stubber):
        stubber.add_client_error("delete_object", service_error_code="NoSuchKey", http_status_code=404)
        await store.delete_object("a/b/c.pdf")

    async def test_delete_forbidden_raises(self, store, stubber):
        stubber.add_client_error("delete_object", service_error_code="AccessDenied", http_status_code=403)

        with pytest.raises(ObjectStoreError, match="Delete failed"):
            await store.delete_object("a/b/c.pdf")

    async def test_delete_objects_batches(self, store, stubber):
        keys = [f"user123/previews/{i}.jpg" for i in range(DELETE_BATCH_SIZE + 5)]
        stubber.add_response(
            "delete_objects",
            {},
            {
                "Bucket": BUCKET,
                "Delete": {
                    "Objects": [{"Key": key} for key in keys[:DELETE_BATCH_SIZE]],
                    "Quiet": True,
                },
            },
        )
        stubber.add_response(
            "delete_objects",
            {},
            {
                "Bucket": BUCKET,
                "Delete": {
                    "Objects": [{"Key": key} for key in keys[DELETE_BATCH_SIZE:]],
                    "Quiet": True,
                },
            },
        )

        await store.delete_objects(keys)

    async def test_delete_objects_reports_per_key_errors(self, store, stubber):
        stubber.add_response(
            "delete_objects",
            {"Errors": [{"Key": "a.jpg", "Code": "AccessDenied", "Message": "denied"}]},
        )

        with pytest.raises(ObjectStoreError, match="a.jpg"):
            await store.delete_objects(["a.jpg"])


# ---------------------------------------------------------------------------
# Mock Store and Factory
# ---------------------------------------------------------------------------

class TestMockObjectStore:
    """Tests for the in-memory store."""

    async def test_starts_without_bucket(self):
        store = MockObjectStore()
        assert await store.bucket_exists() is False

        await store.create_bucket()
        assert await store.bucket_exists() is True

    async def test_list_and_delete_by_prefix(self):
        store = MockObjectStore()
        await store.put_object("u1/resumes/a.pdf", b"a", "application/pdf")
        await store.put_object("u1/pictures/b.jpg", b"b", "image/jpeg")
        await store.put_object("u2/resumes/a.pdf", b"c", "application/pdf")

        keys = await store.list_keys("u1/")
        await store.delete_objects(keys)

        assert list(store.objects) == ["u2/resumes/a.pdf"]

    async def test_delete_missing_is_noop(self):
        store = MockObjectStore()
        await store.delete_object("nothing/here.pdf")


class TestCreateObjectStore:
    """Tests for the store factory."""

    def test_mock_mode_returns_mock_with_bucket_name(self):
        config = S3Config("k", "s", "my-bucket")
        store = create_object_store(config=config, mock_mode=True)

        assert isinstance(store, MockObjectStore)
        assert store.bucket_name == "my-bucket"

    def test_real_mode_requires_config(self):
        with pytest.raises(ValueError, match="config is required"):
            create_object_store()

    def test_real_mode_builds_s3_store(self):
        config = S3Config("k", "s", "my-bucket", endpoint_url="http://localhost:9000")
        store = create_object_store(config=config)

        assert isinstance(store, S3ObjectStore)
        assert store.bucket_name == "my-bucket"
