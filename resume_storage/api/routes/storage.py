"""
File storage API endpoints.

Upload and delete a user's pictures, previews and resumes:
1. POST   /{tenant_id}/{category}             - store a file, returns its key and public URL
2. DELETE /{tenant_id}/{category}/{filename}  - delete one file
3. DELETE /{tenant_id}                        - purge a user's files (optionally one category)

Stored objects are served straight from the bucket; these endpoints only
write and remove them.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, File, Form, HTTPException, Query, Response, UploadFile, status
from pydantic import BaseModel, Field

from ...core.storage import (
    StorageDeleteError,
    StorageFolderDeleteError,
    StorageUploadError,
    UploadCategory,
    tenant_prefix,
)
from ..dependencies import AuthenticatedUser, SettingsDep, StorageServiceDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class UploadResponse(BaseModel):
    """Response after storing a file."""
    url: str = Field(description="Public URL of the stored object")
    key: str = Field(description="Object key inside the bucket; the URL ends with it")
    filename: str = Field(description="Stored name without extension, used to delete the file")
    category: UploadCategory = Field(description="Category the file was stored under")
    size_bytes: int = Field(description="Size of the uploaded payload before processing")


class FolderDeleteResponse(BaseModel):
    """Response after purging a user's files."""
    prefix: str = Field(description="Key prefix that was purged")
    deleted: int = Field(description="Number of objects removed")


# ---------------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------------

def check_content_type(category: UploadCategory, content_type: Optional[str]) -> None:
    """Reject payloads whose declared type doesn't fit the category."""
    if not content_type:
        return

    if category.is_image and not content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type: {content_type}. Upload an image."
        )
    if not category.is_image and content_type != "application/pdf":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type: {content_type}. Upload a PDF."
        )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/{tenant_id}/{category}",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a file",
    description="Store a picture, preview or resume for a user. Images are resized to fit 600x600.",
)
async def upload_file(
    tenant_id: str,
    category: UploadCategory,
    file: Annotated[UploadFile, File(description="Image (pictures, previews) or PDF (resumes)")],
    api_key: AuthenticatedUser,
    storage: StorageServiceDep,
    settings: SettingsDep,
    filename: Annotated[Optional[str], Form(description="Readable name; a random id is used if empty")] = None,
) -> UploadResponse:
    """
    Upload a file for a user.

    The stored name comes from the filename form field, not from the
    uploaded file's own name, so uploads without one get a fresh id.
    """
    check_content_type(category, file.content_type)

    data = await file.read()

    max_size_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(data) > max_size_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size: {settings.max_upload_size_mb}MB"
        )

    logger.info(
        "File upload started",
        extra={
            "tenant_id": tenant_id,
            "category": category.value,
            "upload_filename": file.filename,
            "content_type": file.content_type,
        }
    )

    try:
        stored = await storage.store_file(tenant_id, category, data, filename)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except StorageUploadError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    return UploadResponse(
        url=stored.url,
        key=stored.key.path,
        filename=stored.key.filename,
        category=category,
        size_bytes=len(data),
    )


@router.delete(
    "/{tenant_id}/{category}/{filename}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a file",
    description="Delete one stored file. Deleting a file that doesn't exist succeeds.",
)
async def delete_file(
    tenant_id: str,
    category: UploadCategory,
    filename: str,
    api_key: AuthenticatedUser,
    storage: StorageServiceDep,
) -> Response:
    """Delete a user's file by the name it was uploaded with."""
    try:
        await storage.delete(tenant_id, category, filename)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except StorageDeleteError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{tenant_id}",
    response_model=FolderDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete all of a user's files",
    description="Purge every stored file for a user, or only one category.",
)
async def delete_tenant_files(
    tenant_id: str,
    api_key: AuthenticatedUser,
    storage: StorageServiceDep,
    category: Annotated[Optional[UploadCategory], Query()] = None,
) -> FolderDeleteResponse:
    """
    Purge a user's files.

    Used when an account or all of its resumes are deleted.
    """
    try:
        deleted = await storage.delete_tenant(tenant_id, category)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except StorageFolderDeleteError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    prefix = tenant_prefix(tenant_id, category)
    return FolderDeleteResponse(prefix=prefix, deleted=deleted)
