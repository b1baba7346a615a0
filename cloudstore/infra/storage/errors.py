"""Error taxonomy for object storage clients.

Every error raised by a storage client derives from :class:`StorageError`.
The underlying backend error, when there is one, is chained with
``raise ... from`` and also kept on ``cause`` for inspection.
"""

from __future__ import annotations

ERROR_MISSING_REQUIRED = "missing required"
ERROR_CREATING_STORAGE_CLIENT = "error creating storage client"
ERROR_CLOSING_STORAGE_CLIENT = "error closing storage client"
ERROR_STORAGE_CLIENT_CLOSED = "storage client is closed"
ERROR_LISTING_OBJECTS = "error listing storage bucket objects"
ERROR_DELETING_OBJECT = "error deleting storage bucket object"
ERROR_DELETING_OBJECTS = "error deleting storage bucket objects"
ERROR_MISSING_BUCKET_NAME = "bucket name missing"
ERROR_MISSING_FILE_PATH = "file path missing"
ERROR_MISSING_FILE_NAME = "file name missing"


class StorageError(RuntimeError):
    """Raised when object storage operations fail."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.key = key
        self.cause = cause
        super().__init__(message)


class MissingRequiredError(StorageError):
    """Raised when a required collaborator is not supplied."""


class RequestValidationError(StorageError):
    """Raised when a file request lacks a field the operation needs."""


class BucketNameMissingError(RequestValidationError):
    def __init__(self, message: str = ERROR_MISSING_BUCKET_NAME) -> None:
        super().__init__(message)


class FilePathMissingError(RequestValidationError):
    def __init__(self, message: str = ERROR_MISSING_FILE_PATH) -> None:
        super().__init__(message)


class FileNameMissingError(RequestValidationError):
    def __init__(self, message: str = ERROR_MISSING_FILE_NAME) -> None:
        super().__init__(message)


class ObjectInaccessibleError(StorageError):
    """Raised when object metadata cannot be fetched."""


class UploadError(StorageError):
    """Raised when copying into an object or committing it fails."""


class DownloadError(StorageError):
    """Raised when copying an object into a sink fails."""


class ObjectReadError(StorageError):
    """Raised when a ranged read fails."""


class ObjectListingError(StorageError):
    """Raised when bucket iteration fails part way.

    ``names`` holds the object names collected before the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        names: list[str] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.names = list(names or [])
        super().__init__(message, cause=cause)


class ObjectDeletionError(StorageError):
    """Raised when deleting an object fails.

    For bulk deletes ``key`` names the failing object and ``deleted`` lists the
    objects already removed; they are not restored.
    """

    def __init__(
        self,
        message: str,
        key: str | None = None,
        *,
        deleted: list[str] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.deleted = list(deleted or [])
        super().__init__(message, key=key, cause=cause)


class StorageClientCreationError(StorageError):
    """Raised when the backend client cannot be built or connected."""


class StorageClientCloseError(StorageError):
    """Raised when releasing the backend connection fails."""


class StorageClientClosedError(StorageError):
    """Raised when an operation is invoked on a closed client."""

    def __init__(self, message: str = ERROR_STORAGE_CLIENT_CLOSED) -> None:
        super().__init__(message)


class StorageBackendNotConfiguredError(StorageError):
    """Raised when the configured storage backend is not supported."""
