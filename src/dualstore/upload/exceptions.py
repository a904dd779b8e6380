"""Exceptions raised by the upload pipeline."""


class UploadServiceError(Exception):
    """Base exception for the upload pipeline."""
    pass


class NoFileError(UploadServiceError):
    """Exception raised when the request carries no file field."""

    def __init__(self, field_name: str = "file"):
        self.field_name = field_name
        super().__init__(f"No file found in upload request (expected field {field_name!r})")


class SizeLimitExceeded(UploadServiceError):
    """Exception raised when the uploaded stream grows past the size cap."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"File size exceeds maximum allowed size of {limit} bytes")


class IoError(UploadServiceError):
    """Exception raised when local filesystem operations fail."""
    pass


class MultipartError(UploadServiceError):
    """Exception raised when the multipart body is malformed or truncated."""
    pass


class BackendError(UploadServiceError):
    """Exception raised by a storage backend, tagged with its name."""

    backend = "unknown"

    def __init__(self, message: str, backend: str | None = None):
        if backend is not None:
            self.backend = backend
        super().__init__(message)


class ObjectStoreError(BackendError):
    """Exception raised when the object store rejects or fails an upload."""

    backend = "object_store"


class ContentStoreError(BackendError):
    """Exception raised when the content-addressed store fails an upload."""

    backend = "content_store"


class UploadError(UploadServiceError):
    """Replication-stage failure that cannot be pinned on one backend."""
    pass
