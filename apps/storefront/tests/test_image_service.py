"""
Tests for image_service — product image validation and storage extensions.
"""

from io import BytesIO

import pytest
from PIL import Image

from storefront.services import image_service
from storefront.services.exceptions import ImageValidationError


def _make_image(width=100, height=100, fmt="JPEG", mode="RGB"):
    """Create a minimal test image and return its bytes."""
    img = Image.new(mode, (width, height))
    buf = BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


# ============================================================================
# validate_product_image
# ============================================================================


class TestValidateProductImage:
    """Tests for validate_product_image()."""

    @pytest.mark.parametrize(
        "fmt,content_type",
        [("JPEG", "image/jpeg"), ("PNG", "image/png"), ("WEBP", "image/webp"), ("GIF", "image/gif")],
    )
    def test_valid_images(self, fmt, content_type):
        """Common image formats pass validation."""
        image_service.validate_product_image(_make_image(fmt=fmt), content_type)

    def test_file_too_large(self):
        """Files exceeding 5MB are rejected before decoding."""
        data = b"\x00" * (image_service.MAX_FILE_SIZE_BYTES + 1)
        with pytest.raises(ImageValidationError) as exc_info:
            image_service.validate_product_image(data, "image/jpeg")
        assert str(exc_info.value) == image_service.TOO_LARGE_MESSAGE

    def test_wrong_content_type(self):
        """Non-image content types are rejected."""
        with pytest.raises(ImageValidationError) as exc_info:
            image_service.validate_product_image(_make_image(), "application/pdf")
        assert str(exc_info.value) == image_service.NOT_AN_IMAGE_MESSAGE

    @pytest.mark.parametrize("content_type", ["", None])
    def test_missing_content_type(self, content_type):
        with pytest.raises(ImageValidationError):
            image_service.validate_product_image(_make_image(), content_type)

    def test_corrupted_file(self):
        """Bytes that only claim to be an image are rejected."""
        with pytest.raises(ImageValidationError) as exc_info:
            image_service.validate_product_image(b"this is not an image", "image/jpeg")
        assert str(exc_info.value) == image_service.NOT_AN_IMAGE_MESSAGE

    def test_too_many_pixels(self):
        """Images over the pixel limit are rejected even when the file is small."""
        data = _make_image(width=6000, height=5000, fmt="PNG", mode="1")
        assert len(data) < image_service.MAX_FILE_SIZE_BYTES
        with pytest.raises(ImageValidationError) as exc_info:
            image_service.validate_product_image(data, "image/png")
        assert str(exc_info.value) == image_service.TOO_LARGE_MESSAGE


# ============================================================================
# image_extension
# ============================================================================


class TestImageExtension:
    """Tests for image_extension()."""

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("photo.JPG", "jpg"),
            ("archive.tar.gz", "gz"),
            ("shoe.webp", "webp"),
            ("no-extension", "jpg"),
            ("", "jpg"),
            ("trailing.", "jpg"),
            ("عکس.پی‌ان‌جی", "jpg"),
            ("weird.p n g", "jpg"),
        ],
    )
    def test_extension(self, filename, expected):
        assert image_service.image_extension(filename) == expected
