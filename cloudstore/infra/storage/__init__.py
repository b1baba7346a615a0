"""Object storage abstraction layer.

This module provides a protocol-based abstraction for object storage backends,
with Google Cloud Storage, S3-compatible and local filesystem implementations.
"""

from .base import BaseStorageClient
from .client import CloudStorage, ObjectAttrs
from .errors import (
    BucketNameMissingError,
    DownloadError,
    FileNameMissingError,
    FilePathMissingError,
    MissingRequiredError,
    ObjectDeletionError,
    ObjectInaccessibleError,
    ObjectListingError,
    ObjectReadError,
    RequestValidationError,
    StorageBackendNotConfiguredError,
    StorageClientCloseError,
    StorageClientClosedError,
    StorageClientCreationError,
    StorageError,
    UploadError,
)
from .factory import create_storage_client
from .request import FileRequest
from .streams import DiscardReadAtAdaptor, ReadAtAdaptor

__all__ = [
    "BaseStorageClient",
    "BucketNameMissingError",
    "CloudStorage",
    "DiscardReadAtAdaptor",
    "DownloadError",
    "FileNameMissingError",
    "FilePathMissingError",
    "FileRequest",
    "MissingRequiredError",
    "ObjectAttrs",
    "ObjectDeletionError",
    "ObjectInaccessibleError",
    "ObjectListingError",
    "ObjectReadError",
    "ReadAtAdaptor",
    "RequestValidationError",
    "StorageBackendNotConfiguredError",
    "StorageClientCloseError",
    "StorageClientClosedError",
    "StorageClientCreationError",
    "StorageError",
    "UploadError",
    "create_storage_client",
]
