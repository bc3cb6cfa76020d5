"""
Byte transforms applied before an upload reaches the store.

Images are downscaled to fit a 600x600 box and re-encoded as JPEG;
documents are stored exactly as received.
"""

import io

from PIL import Image, ImageOps

from .models import UploadCategory

MAX_IMAGE_SIZE = 600
JPEG_QUALITY = 80


class ImageTransformError(ValueError):
    """Raised when uploaded bytes cannot be decoded or re-encoded as an image."""
    pass


def resize_image(data: bytes, max_size: int = MAX_IMAGE_SIZE, quality: int = JPEG_QUALITY) -> bytes:
    """
    Fit an image within max_size x max_size and encode it as JPEG.

    Aspect ratio is preserved and smaller images are never upscaled.
    """
    try:
        with Image.open(io.BytesIO(data)) as im:
            # phone photos carry their rotation in EXIF
            im = ImageOps.exif_transpose(im)
            im = im.convert("RGB")
            im.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)

            buf = io.BytesIO()
            im.save(buf, format="JPEG", quality=quality)
            return buf.getvalue()
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageTransformError(f"Could not process image: {e}") from e


def transform(data: bytes, category: UploadCategory) -> bytes:
    """Apply the category's transform to uploaded bytes."""
    if category.is_image:
        return resize_image(data)
    return data
