"""
Domain models for stored user files.

No framework or SDK imports here. The category decides the file type; a
caller can never change it through the filename.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class UploadCategory(Enum):
    """
    The kinds of file a user can store.

    Values double as the middle path segment of every object key, so
    they are part of the public URL contract and must not change.
    """
    PICTURES = "pictures"   # profile picture
    PREVIEWS = "previews"   # rendered resume preview
    RESUMES = "resumes"     # exported resume PDF

    @property
    def is_image(self) -> bool:
        return self is not UploadCategory.RESUMES

    @property
    def extension(self) -> str:
        return "jpg" if self.is_image else "pdf"

    @property
    def content_type(self) -> str:
        return "image/jpeg" if self.is_image else "application/pdf"


@dataclass(frozen=True)
class ObjectKey:
    """
    Location of one object inside the bucket.

    Renders as {tenant_id}/{category}/{filename}.{extension}.
    """
    tenant_id: str
    category: UploadCategory
    filename: str

    @property
    def basename(self) -> str:
        """Filename with the category's extension."""
        return f"{self.filename}.{self.category.extension}"

    @property
    def path(self) -> str:
        return f"{self.tenant_id}/{self.category.value}/{self.basename}"

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True)
class ObjectMetadata:
    """HTTP metadata written alongside an object."""
    content_type: str
    content_disposition: Optional[str] = None


@dataclass(frozen=True)
class StoredFile:
    """Where an upload ended up."""
    key: ObjectKey
    url: str
