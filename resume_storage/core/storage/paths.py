"""
Object naming policy.

Keys look like {tenant_id}/{category}/{filename}.{extension}. Everything
here is pure: the same inputs always give the same key, except that an
empty filename is replaced by a random identifier.
"""

import re
from typing import Any, Optional
from uuid import uuid4

from slugify import slugify

from .models import ObjectKey, ObjectMetadata, UploadCategory

# upload extensions a caller may append; the category owns the stored one
_EXTENSION_RE = re.compile(r"\.(pdf|jpe?g|png|webp|gif|heic)$", re.IGNORECASE)

_TENANT_ID_RE = re.compile(r"[A-Za-z0-9_-]+")


def normalize_filename(filename: Optional[str]) -> str:
    """
    Turn a human filename into a URL-safe slug.

    Drops a trailing upload extension (.pdf, .jpg, .png, ...), lowercases,
    strips diacritics and joins words with single hyphens. Other dots are
    kept as separators: "My Résumé.pdf" becomes "my-resume" and
    "John.Smith" becomes "john-smith". Returns an empty string when
    nothing usable is left.
    """
    if not filename:
        return ""
    stem = _EXTENSION_RE.sub("", filename.strip())
    return slugify(stem)


def generate_filename() -> str:
    """Random collision-resistant filename."""
    return uuid4().hex


def _validate_tenant_id(tenant_id: str) -> None:
    if not tenant_id or not _TENANT_ID_RE.fullmatch(tenant_id):
        raise ValueError(f"Invalid tenant id: {tenant_id!r}")


def derive_key(
    tenant_id: str,
    category: UploadCategory,
    filename: Optional[str] = None,
) -> ObjectKey:
    """
    Build the object key for a tenant's file.

    If filename is missing or normalizes to nothing, a fresh random
    identifier is used instead, so every such call yields a new key.
    """
    _validate_tenant_id(tenant_id)
    normalized = normalize_filename(filename) or generate_filename()
    return ObjectKey(tenant_id=tenant_id, category=category, filename=normalized)


def tenant_prefix(tenant_id: str, category: Optional[UploadCategory] = None) -> str:
    """Prefix covering all of a tenant's objects, or one category of them."""
    _validate_tenant_id(tenant_id)
    if category is None:
        return f"{tenant_id}/"
    return f"{tenant_id}/{category.value}/"


def build_public_url(base_url: str, key: ObjectKey | str) -> str:
    """Public URL of an object: the base URL and key joined by one slash."""
    return f"{base_url.rstrip('/')}/{key}"


def select_metadata(category: UploadCategory, filename: str) -> ObjectMetadata:
    """
    Pick the metadata stored with an object.

    Documents are served as attachments so browsers suggest the readable
    filename instead of the storage key.
    """
    if category.is_image:
        return ObjectMetadata(content_type=category.content_type)

    return ObjectMetadata(
        content_type=category.content_type,
        content_disposition=f"attachment; filename={filename}.{category.extension}",
    )


def public_read_policy(bucket_name: str) -> dict[str, Any]:
    """Bucket policy allowing anonymous reads under the known category folders."""
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Sid": "PublicAccess",
                "Effect": "Allow",
                "Action": ["s3:GetObject"],
                "Principal": {"AWS": ["*"]},
                "Resource": [
                    f"arn:aws:s3:::{bucket_name}/*/{category.value}/*"
                    for category in UploadCategory
                ],
            }
        ],
    }
