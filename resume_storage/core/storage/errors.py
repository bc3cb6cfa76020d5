"""
Failures surfaced by the storage service.

Each one wraps the underlying store error as its __cause__; callers only
ever see these stable messages.
"""


class StorageError(Exception):
    """Base class for storage service failures."""
    pass


class StorageProvisioningError(StorageError):
    """Bucket check, creation or policy assignment failed at startup."""
    pass


class StorageUploadError(StorageError):
    """Resizing or writing an upload failed."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__("There was an error while uploading the file.")


class StorageDeleteError(StorageError):
    """Deleting a single object failed."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(
            f"There was an error while deleting the document at the specified path: {key}."
        )


class StorageFolderDeleteError(StorageError):
    """Listing or bulk-deleting a prefix failed."""

    def __init__(self, bucket_name: str, prefix: str) -> None:
        self.bucket_name = bucket_name
        self.prefix = prefix
        super().__init__(
            f"There was an error while deleting the folder at the specified path: "
            f"{bucket_name}/{prefix}."
        )
