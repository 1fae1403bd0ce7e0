"""
Domain errors raised by the storefront services.

Routes translate these into HTTP responses; the messages are user-facing
(Persian) and safe to return as-is.
"""


class FieldValidationError(ValueError):
    """Raised when a submitted field fails its validation rule."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class ImageValidationError(ValueError):
    """Raised when an uploaded image is rejected."""


class SlugConflictError(ValueError):
    """Raised when no unique slug could be stored after retrying."""


class StorageError(RuntimeError):
    """Raised when object storage rejects an upload."""


class AuthProviderError(RuntimeError):
    """Raised when the hosted auth provider fails or rejects a request."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
