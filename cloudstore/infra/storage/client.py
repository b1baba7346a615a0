"""Storage client protocol and data types.

This module defines the capability interface every object storage backend
exposes: streamed upload and download, offset-addressed reads, bucket
listing, single and bulk deletion, and connection teardown.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Protocol

from cloudstore.infra.storage.request import FileRequest

ONE_KB = 1024
THIRTY_TWO_KB = 32 * ONE_KB


@dataclass(frozen=True, slots=True)
class ObjectAttrs:
    """Metadata of a stored object."""

    name: str
    size_bytes: int | None = None
    created: datetime | None = None
    updated: datetime | None = None


class CloudStorage(Protocol):
    """Protocol defining the interface for object storage backends.

    Implementations must provide all methods defined here. Every method
    validates its request before touching the backend.
    """

    def upload_file(
        self,
        stream: BinaryIO,
        request: FileRequest,
        *,
        timeout: float | None = None,
    ) -> int:
        """Create or replace the object named by the request.

        Args:
            stream: Readable binary source, consumed to its end.
            request: Target object; ``file`` is required.
            timeout: Caller budget in seconds, capped by the transfer ceiling.

        Returns:
            Number of bytes written.

        Raises:
            RequestValidationError: If bucket or file is missing.
            UploadError: If the copy or the final commit fails.
        """
        ...

    def download_file(
        self,
        stream: BinaryIO,
        request: FileRequest,
        *,
        timeout: float | None = None,
    ) -> int:
        """Copy the whole object into a writable sink.

        Args:
            stream: Writable binary sink.
            request: Source object; ``file`` is required.
            timeout: Caller budget in seconds, capped by the transfer ceiling.

        Returns:
            Number of bytes read.

        Raises:
            RequestValidationError: If bucket or file is missing.
            ObjectInaccessibleError: If the object metadata cannot be fetched.
            DownloadError: If opening or copying the object fails.
        """
        ...

    def read_at(
        self,
        request: FileRequest,
        buffer: bytearray | memoryview,
        offset: int,
        *,
        timeout: float | None = None,
    ) -> int:
        """Read up to ``len(buffer)`` bytes of the object starting at ``offset``.

        Args:
            request: Source object; ``file`` is required.
            buffer: Writable destination; its length is the read capacity.
            offset: Byte offset into the object.
            timeout: Caller budget in seconds.

        Returns:
            Number of bytes placed in ``buffer``; 0 when ``offset`` is at or
            past the end of the object.

        Raises:
            RequestValidationError: If bucket or file is missing.
            ObjectInaccessibleError: If the object metadata cannot be fetched.
            ObjectReadError: If opening, skipping or reading fails.
        """
        ...

    def list_objects(
        self, request: FileRequest, *, timeout: float | None = None
    ) -> list[str]:
        """List the names of every object in the request's bucket.

        Raises:
            BucketNameMissingError: If bucket is missing.
            ObjectListingError: If iteration fails; carries partial names.
        """
        ...

    def delete_object(
        self, request: FileRequest, *, timeout: float | None = None
    ) -> None:
        """Delete the object at ``path/file``.

        Raises:
            RequestValidationError: If bucket, path or file is missing.
            ObjectDeletionError: If the backend delete fails, including when
                the object does not exist.
        """
        ...

    def delete_objects(
        self, request: FileRequest, *, timeout: float | None = None
    ) -> None:
        """Delete every object in the request's bucket, stopping at the first failure.

        Raises:
            BucketNameMissingError: If bucket is missing.
            ObjectListingError: If iteration fails.
            ObjectDeletionError: If an object cannot be deleted.
        """
        ...

    def close(self) -> None:
        """Release the backend connection.

        Raises:
            StorageClientCloseError: If the backend fails to close.
        """
        ...
