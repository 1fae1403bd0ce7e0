"""
Image service for validating product image uploads.

Checks the declared content type, the file size, and that Pillow can actually
decode the bytes as an image.
"""

import logging
from io import BytesIO

from PIL import Image

from storefront.services.exceptions import ImageValidationError

logger = logging.getLogger(__name__)

# Validation constants
MAX_FILE_SIZE_BYTES = 5 * 1024 * 1024  # 5MB
MAX_IMAGE_PIXELS = 25_000_000  # 25MP (~5000x5000)
DEFAULT_EXTENSION = "jpg"

NOT_AN_IMAGE_MESSAGE = "فایل انتخابی باید یک تصویر باشد"
TOO_LARGE_MESSAGE = "حجم تصویر نمی‌تواند بیشتر از ۵ مگابایت باشد"

# Pillow decompression bomb guard
Image.MAX_IMAGE_PIXELS = MAX_IMAGE_PIXELS


def validate_product_image(file_bytes: bytes, content_type: str) -> None:
    """
    Validate an uploaded product image.

    Args:
        file_bytes: Raw uploaded file bytes
        content_type: MIME type from the upload

    Raises:
        ImageValidationError: If the file is not an image, too large, or corrupted
    """
    if not content_type or not content_type.startswith("image/"):
        raise ImageValidationError(NOT_AN_IMAGE_MESSAGE)

    if len(file_bytes) > MAX_FILE_SIZE_BYTES:
        raise ImageValidationError(TOO_LARGE_MESSAGE)

    try:
        img = Image.open(BytesIO(file_bytes))
        width, height = img.size
        if width * height > MAX_IMAGE_PIXELS:
            raise ImageValidationError(TOO_LARGE_MESSAGE)
        img.verify()
    except ImageValidationError:
        raise
    except Image.DecompressionBombError:
        raise ImageValidationError(TOO_LARGE_MESSAGE)
    except Exception as e:
        logger.info("Rejected undecodable upload (%s): %s", content_type, e)
        raise ImageValidationError(NOT_AN_IMAGE_MESSAGE)


def image_extension(filename: str) -> str:
    """Return the lowercase file extension of ``filename``, or ``jpg``."""
    if not filename or "." not in filename:
        return DEFAULT_EXTENSION
    ext = filename.rsplit(".", 1)[-1].strip().lower()
    # Storage keys stay ASCII
    if not ext or not ext.isascii() or not ext.isalnum():
        return DEFAULT_EXTENSION
    return ext
